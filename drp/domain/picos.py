# drp/domain/picos.py
"""
Detecção de picos de venda.

Regra: o bucket ``i`` é pico quando ``valor_i > fator × mediana`` dos
**outros** buckets com venda (> 0). São necessários pelo menos dois outros
buckets com venda para haver referência; com menos que isso nada é marcado.

Com pico, a média ajustada é calculada limitando cada bucket de pico à sua
mediana de referência: ``media_ajustada = Σ buckets limitados / W``. A média
bruta continua disponível em ``media_diaria``.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, Sequence

from drp.config import DEFAULTS
from drp.domain.estatistica import mediana
from drp.domain.models import PerfilDemanda

MIN_REFERENCIAS = 2


def detectar_picos(buckets: Sequence[float], fator: float = DEFAULTS.fator_pico) -> Dict[int, float]:
    """Retorna ``{indice: mediana_de_referencia}`` para cada bucket de pico."""
    picos: Dict[int, float] = {}
    for i, valor in enumerate(buckets):
        if valor <= 0:
            continue
        outros = [b for j, b in enumerate(buckets) if j != i and b > 0]
        if len(outros) < MIN_REFERENCIAS:
            continue
        ref = mediana(outros)
        if valor > fator * ref:
            picos[i] = ref
    return picos


def marcar_picos(perfil: PerfilDemanda, fator: float = DEFAULTS.fator_pico) -> PerfilDemanda:
    """Devolve uma cópia do perfil com ``tem_pico``, ``picos`` e ``media_ajustada``."""
    picos = detectar_picos(perfil.buckets, fator)
    if not picos:
        return replace(perfil, tem_pico=False, picos=(), media_ajustada=perfil.media_diaria)
    limitados = [picos.get(i, b) for i, b in enumerate(perfil.buckets)]
    ajustada = sum(limitados) / perfil.periodo_dias
    return replace(
        perfil,
        tem_pico=True,
        picos=tuple(sorted(picos)),
        media_ajustada=ajustada,
    )
