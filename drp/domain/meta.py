# drp/domain/meta.py
"""
Cálculo da meta (nível alvo de estoque) por filial.

    meta_vendas = media_ajustada × (lead_time_dias + dias_seguranca)

arredondada para cima em unidades inteiras. Um estoque mínimo configurado
maior que a meta de vendas prevalece. Sem histórico e sem mínimo a filial
é reportada com ``meta = 0`` e ``planejavel = False``.
"""

from __future__ import annotations

from math import ceil

from drp.domain.models import (
    TIPO_ESTOQUE_MINIMO,
    TIPO_SEM_HISTORICO,
    EstadoEstoque,
    MetaFilial,
    PoliticaReposicao,
    ResolucaoDemanda,
)
from drp.domain.validacao import validar_unidades


def meta_por_vendas(media_diaria: float, politica: PoliticaReposicao) -> int:
    # round() absorve ruído de ponto flutuante antes do ceil (ex.: 2.0000000001)
    return int(ceil(round(float(media_diaria) * politica.dias_cobertura, 6)))


def calcular_meta(
    resolucao: ResolucaoDemanda,
    estoque: EstadoEstoque,
    politica: PoliticaReposicao,
) -> MetaFilial:
    minimo = validar_unidades(estoque.estoque_minimo, f"estoque_minimo ({estoque.filial})")

    if politica.abater_combinados and resolucao.estoque_combinado > 0:
        # O grupo já abastece a filial: reposição só até o mínimo do próprio item
        return MetaFilial(minimo, TIPO_ESTOQUE_MINIMO, planejavel=True)

    if resolucao.tipo_calculo == TIPO_SEM_HISTORICO:
        if minimo > 0:
            return MetaFilial(minimo, TIPO_ESTOQUE_MINIMO, planejavel=True)
        return MetaFilial(0, TIPO_SEM_HISTORICO, planejavel=False)

    meta_vendas = meta_por_vendas(resolucao.perfil.media_ajustada, politica)
    if minimo > meta_vendas:
        return MetaFilial(minimo, TIPO_ESTOQUE_MINIMO, planejavel=True, meta_vendas=meta_vendas)
    return MetaFilial(meta_vendas, resolucao.tipo_calculo, planejavel=True, meta_vendas=meta_vendas)


def necessidade(meta: int, estoque_atual: float) -> int:
    """``max(0, meta - estoque_atual)``."""
    return max(0, int(meta) - int(estoque_atual))
