from datetime import date, datetime, timedelta
from math import isclose

import pytest

from drp.domain.erros import DadosInvalidosError
from drp.domain.models import ObservacaoVenda
from drp.domain.perfil_demanda import (
    classificar_confiabilidade,
    montar_buckets,
    perfil_de_buckets,
    perfil_demanda,
)

FIM = date(2024, 6, 30)


def _obs(qtd, dias_atras=0, filial="00"):
    return ObservacaoVenda(filial, FIM - timedelta(days=dias_atras), qtd)


@pytest.mark.parametrize(
    "cv,esperado",
    [
        (0.0, "alta"),
        (0.2999, "alta"),
        (0.30, "media"),
        (0.40, "media"),
        (0.50, "media"),
        (0.5001, "baixa"),
        (1.5, "baixa"),
        (None, "baixa"),
    ],
)
def test_classificar_confiabilidade(cv, esperado):
    assert classificar_confiabilidade(cv) == esperado


def test_cv_exatamente_30_porcento_e_media():
    # média 10, desvio populacional 3 -> CV 0.30
    p = perfil_de_buckets("P1", "00", 2, [7, 13])
    assert p.coeficiente_variacao == 0.3
    assert p.confiabilidade == "media"


def test_cv_exatamente_50_porcento_e_media():
    # média 2, desvio populacional 1 -> CV 0.50
    p = perfil_de_buckets("P1", "00", 2, [1, 3])
    assert p.coeficiente_variacao == 0.5
    assert p.confiabilidade == "media"


def test_cv_logo_abaixo_de_30_e_alta_e_acima_de_50_e_baixa():
    assert perfil_de_buckets("P1", "00", 2, [7.1, 12.9]).confiabilidade == "alta"
    assert perfil_de_buckets("P1", "00", 2, [0.9, 3.1]).confiabilidade == "baixa"


def test_perfil_vazio_nao_e_erro():
    p = perfil_demanda([], 90, FIM, "P1", "00")
    assert p.total_vendas == 0
    assert p.media_diaria == 0
    assert p.coeficiente_variacao is None
    assert p.confiabilidade == "baixa"
    assert p.tem_pico is False
    assert p.sem_historico


def test_venda_constante_tem_confiabilidade_alta():
    obs = [_obs(2, i) for i in range(30)]
    p = perfil_demanda(obs, 30, FIM)
    assert p.total_vendas == 60
    assert p.media_diaria == 2.0
    assert p.desvio_padrao == 0.0
    assert p.coeficiente_variacao == 0.0
    assert p.confiabilidade == "alta"


def test_venda_concentrada_tem_confiabilidade_baixa():
    p = perfil_demanda([_obs(30, 5)], 30, FIM)
    assert p.media_diaria == 1.0
    assert isclose(p.desvio_padrao, 29 ** 0.5)
    assert p.confiabilidade == "baixa"


def test_janela_inclui_data_fim_e_exclui_fora_do_periodo():
    obs = [_obs(5, 0), _obs(7, 29), _obs(100, 30), ObservacaoVenda("00", FIM + timedelta(days=1), 50)]
    p = perfil_demanda(obs, 30, FIM)
    assert p.total_vendas == 12
    assert len(p.buckets) == 30
    assert p.buckets[-1] == 5
    assert p.buckets[0] == 7


def test_aceita_datetime_nas_observacoes():
    obs = [ObservacaoVenda("00", datetime(2024, 6, 30, 15, 0), 3)]
    assert perfil_demanda(obs, 30, FIM).total_vendas == 3


def test_granularidade_mensal():
    # janela de 60 dias terminando em 30/06 começa em 02/05: dois meses
    obs = [_obs(10, 0), _obs(20, 45)]
    buckets = montar_buckets(obs, 60, FIM, "mensal")
    assert buckets == (20.0, 10.0)
    p = perfil_demanda(obs, 60, FIM, granularidade="mensal")
    assert p.media_diaria == 30 / 60
    assert p.granularidade == "mensal"


def test_periodo_invalido():
    with pytest.raises(DadosInvalidosError):
        perfil_demanda([], 45, FIM)


def test_venda_negativa_rejeitada():
    with pytest.raises(DadosInvalidosError):
        perfil_demanda([_obs(-1)], 30, FIM)


def test_granularidade_desconhecida():
    with pytest.raises(DadosInvalidosError):
        perfil_demanda([_obs(1)], 30, FIM, granularidade="semanal")
