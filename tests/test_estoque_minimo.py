import pytest

from drp.domain.estoque_minimo import (
    calcular_estoque_minimo,
    classificar_abc,
    faturamento,
    fator_tendencia,
    sugerir_minimo_por_confiabilidade,
    vendas_por_periodo,
)
from drp.domain.perfil_demanda import perfil_de_buckets


def _obs(fonte, codigo="P1", filial="00"):
    return fonte.vendas[(codigo, filial)]


def test_classificar_abc_inclui_o_proprio_produto():
    classes = classificar_abc({"X": 80, "Y": 15, "Z": 5, "W": 0})
    assert classes == {"X": "A", "Y": "B", "Z": "C", "W": "C"}


def test_classificar_abc_produto_unico_e_c():
    # sozinho acumula 100%
    assert classificar_abc({"X": 10}) == {"X": "C"}


@pytest.mark.parametrize(
    "v90, v90_180, esperado",
    [
        (90, 90, 1.0),
        (300, 10, 2.0),
        (10, 300, 0.5),
        (60, 40, 1.5),
        (5, 0, 1.5),
        (0, 0, 1.0),
    ],
)
def test_fator_tendencia(v90, v90_180, esperado):
    assert fator_tendencia(v90, v90_180) == pytest.approx(esperado)


def test_vendas_por_periodo(fonte, data_fim):
    fonte.venda("P1", "00", 4, dias_atras=10)
    fonte.venda("P1", "00", 6, dias_atras=100)
    fonte.venda("P1", "00", 50, dias_atras=200)
    assert vendas_por_periodo(_obs(fonte), data_fim) == (10.0, 4.0, 6.0)


def test_faturamento_usa_valor_unitario(fonte, data_fim):
    fonte.venda("P1", "00", 2, dias_atras=1, valor_unitario=10.0)
    fonte.venda("P1", "00", 3, dias_atras=2)
    fonte.venda("P1", "00", 9, dias_atras=400, valor_unitario=10.0)
    assert faturamento(_obs(fonte), data_fim, 180) == pytest.approx(23.0)


def test_minimo_estavel_classe_c(fonte, data_fim):
    fonte.venda_diaria("P1", "00", 1, dias=180)
    r = calcular_estoque_minimo("P1", "00", _obs(fonte), data_fim, classe_abc="C")
    assert r.media_vendas_diarias == pytest.approx(1.0)
    assert r.fator_tendencia == pytest.approx(1.0)
    assert r.estoque_minimo_calculado == 36
    assert (r.fator_seguranca, r.buffer_dias) == (1.2, 0)


def test_minimo_classe_a_usa_buffer(fonte, data_fim):
    fonte.venda_diaria("P1", "00", 1, dias=180)
    r = calcular_estoque_minimo("P1", "00", _obs(fonte), data_fim, classe_abc="A")
    assert r.estoque_minimo_calculado == 70


def test_minimo_em_crescimento(fonte, data_fim):
    fonte.venda_diaria("P1", "00", 1, dias=90)
    r = calcular_estoque_minimo("P1", "00", _obs(fonte), data_fim)
    assert r.fator_tendencia == pytest.approx(1.5)
    assert r.estoque_minimo_calculado == 27


def test_minimo_ao_menos_uma_unidade_com_venda(fonte, data_fim):
    fonte.venda("P1", "00", 1, dias_atras=150)
    r = calcular_estoque_minimo("P1", "00", _obs(fonte), data_fim)
    assert r.estoque_minimo_calculado == 1


def test_minimo_sem_vendas_e_zero(data_fim):
    r = calcular_estoque_minimo("P1", "00", [], data_fim)
    assert r.estoque_minimo_calculado == 0
    assert r.fator_tendencia == 1.0


def test_variacao_percentual(fonte, data_fim):
    fonte.venda_diaria("P1", "00", 1, dias=180)
    r = calcular_estoque_minimo("P1", "00", _obs(fonte), data_fim, minimo_anterior=30)
    assert r.variacao_percentual == pytest.approx(20.0)
    sem_anterior = calcular_estoque_minimo("P1", "00", _obs(fonte), data_fim)
    assert sem_anterior.variacao_percentual is None


@pytest.mark.parametrize(
    "buckets, esperado",
    [
        ([2.0] * 30, 14),           # alta: 7 dias
        ([0.0, 4.0] * 15, 42),      # baixa: 21 dias
        ([0.0] * 30, 0),
    ],
)
def test_sugestao_por_confiabilidade(buckets, esperado):
    perfil = perfil_de_buckets("P1", "00", 30, buckets)
    assert sugerir_minimo_por_confiabilidade(perfil) == esperado
