import pytest

from drp.domain.erros import DadosInvalidosError
from drp.domain.meta import calcular_meta, meta_por_vendas, necessidade
from drp.domain.models import EstadoEstoque, PoliticaReposicao, ResolucaoDemanda
from drp.domain.perfil_demanda import perfil_de_buckets

POLITICA = PoliticaReposicao(lead_time_dias=30, dias_seguranca=7)


def _resolucao(media_por_dia, tipo="vendas", estoque_combinado=0.0):
    perfil = perfil_de_buckets("P1", "00", 30, [media_por_dia] * 30)
    return ResolucaoDemanda(perfil, tipo, estoque_combinado)


def _estoque(atual=0, minimo=0):
    return EstadoEstoque("P1", "00", atual, minimo)


def test_meta_por_vendas():
    m = calcular_meta(_resolucao(2.0), _estoque(), POLITICA)
    assert m.meta == 74
    assert m.tipo_calculo == "vendas"
    assert m.planejavel is True


def test_meta_arredonda_para_cima():
    assert meta_por_vendas(0.5, PoliticaReposicao(lead_time_dias=3, dias_seguranca=0)) == 2
    # 0.1 × 30 = 3.0000000000000004 em ponto flutuante
    assert meta_por_vendas(0.1, PoliticaReposicao(lead_time_dias=30, dias_seguranca=0)) == 3


def test_minimo_maior_prevalece():
    m = calcular_meta(_resolucao(1.0), _estoque(minimo=50), POLITICA)
    assert m.meta == 50
    assert m.tipo_calculo == "estoque_minimo"
    assert m.meta_vendas == 37


def test_minimo_menor_nao_altera_meta():
    m = calcular_meta(_resolucao(1.0), _estoque(minimo=10), POLITICA)
    assert m.meta == 37
    assert m.tipo_calculo == "vendas"


def test_combinado_mantem_tipo():
    m = calcular_meta(_resolucao(1.0, "combinado"), _estoque(), POLITICA)
    assert m.tipo_calculo == "combinado"
    assert m.meta == 37


def test_sem_historico_com_minimo():
    m = calcular_meta(_resolucao(0.0, "sem_historico"), _estoque(minimo=4), POLITICA)
    assert (m.meta, m.tipo_calculo, m.planejavel) == (4, "estoque_minimo", True)


def test_sem_historico_sem_minimo_nao_planejavel():
    m = calcular_meta(_resolucao(0.0, "sem_historico"), _estoque(), POLITICA)
    assert (m.meta, m.tipo_calculo, m.planejavel) == (0, "sem_historico", False)


def test_abater_combinados_limita_ao_minimo():
    politica = PoliticaReposicao(30, 7, abater_combinados=True)
    m = calcular_meta(_resolucao(2.0, estoque_combinado=10), _estoque(minimo=3), politica)
    assert (m.meta, m.tipo_calculo) == (3, "estoque_minimo")
    # sem estoque no grupo a regra não se aplica
    m = calcular_meta(_resolucao(2.0, estoque_combinado=0), _estoque(minimo=3), politica)
    assert m.meta == 74


def test_abatimento_ligado_por_padrao():
    assert PoliticaReposicao().abater_combinados is True
    m = calcular_meta(_resolucao(2.0, "combinado", estoque_combinado=500), _estoque(minimo=3), POLITICA)
    assert (m.meta, m.tipo_calculo) == (3, "estoque_minimo")


def test_minimo_fracionado_rejeitado():
    with pytest.raises(DadosInvalidosError):
        calcular_meta(_resolucao(1.0), _estoque(minimo=2.5), POLITICA)


@pytest.mark.parametrize("meta,atual,esperado", [(100, 20, 80), (10, 10, 0), (5, 30, 0), (0, 0, 0)])
def test_necessidade(meta, atual, esperado):
    assert necessidade(meta, atual) == esperado
