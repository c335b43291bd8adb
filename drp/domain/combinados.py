# drp/domain/combinados.py
"""
Resolução de demanda por grupo de combinados (produtos intercambiáveis).

Quando o produto não vendeu na filial dentro da janela, a demanda dos demais
membros do grupo naquela filial é somada bucket a bucket e usada no lugar do
perfil próprio. O estoque dos membros na filial é sempre somado em
``estoque_combinado``.
"""

from __future__ import annotations

from typing import Mapping

from drp.config import DEFAULTS
from drp.domain.models import (
    TIPO_COMBINADO,
    TIPO_SEM_HISTORICO,
    TIPO_VENDAS,
    EstadoEstoque,
    PerfilDemanda,
    ResolucaoDemanda,
)
from drp.domain.perfil_demanda import perfil_de_buckets
from drp.domain.picos import marcar_picos


def somar_estoque_grupo(estoques_grupo: Mapping[str, EstadoEstoque]) -> float:
    return float(sum(e.estoque_atual for e in estoques_grupo.values()))


def resolver_demanda(
    perfil_proprio: PerfilDemanda,
    perfis_grupo: Mapping[str, PerfilDemanda],
    estoques_grupo: Mapping[str, EstadoEstoque],
    fator_pico: float = DEFAULTS.fator_pico,
) -> ResolucaoDemanda:
    """Escolhe o perfil que alimenta a meta da filial.

    Args:
        perfil_proprio: perfil do produto na filial (já com picos marcados).
        perfis_grupo: perfis dos outros membros do grupo na mesma filial.
        estoques_grupo: estoque dos outros membros na mesma filial.
        fator_pico: multiplicador usado ao remarcar picos na série somada.
    """
    estoque_combinado = somar_estoque_grupo(estoques_grupo)

    if perfil_proprio.total_vendas > 0:
        return ResolucaoDemanda(perfil_proprio, TIPO_VENDAS, estoque_combinado)

    com_venda = {c: p for c, p in perfis_grupo.items() if p.total_vendas > 0}
    if not com_venda:
        return ResolucaoDemanda(perfil_proprio, TIPO_SEM_HISTORICO, estoque_combinado)

    n = len(perfil_proprio.buckets)
    soma = [0.0] * n
    for p in com_venda.values():
        for i, v in enumerate(p.buckets[:n]):
            soma[i] += v
    agregado = perfil_de_buckets(
        perfil_proprio.codigo,
        perfil_proprio.filial,
        perfil_proprio.periodo_dias,
        soma,
        perfil_proprio.granularidade,
    )
    agregado = marcar_picos(agregado, fator_pico)
    return ResolucaoDemanda(
        agregado,
        TIPO_COMBINADO,
        estoque_combinado,
        membros=tuple(sorted(com_venda)),
    )
