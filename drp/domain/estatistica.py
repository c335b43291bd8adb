"""
Utilitários estatísticos usados pelo perfil de demanda.

Funções puras sobre sequências de números. Sequências vazias não são erro:
retornam 0.0 (ou ``None`` no caso do coeficiente de variação), de forma que
um produto sem vendas gere um perfil vazio em vez de uma exceção.
"""

from __future__ import annotations

from statistics import mean, median, pstdev, stdev
from typing import Optional, Sequence


def media(valores: Sequence[float]) -> float:
    if not valores:
        return 0.0
    return float(mean(valores))


def desvio_padrao(valores: Sequence[float], populacional: bool = True) -> float:
    """Desvio padrão da série.

    O perfil de demanda usa o desvio **populacional** (divisor N): a janela
    é a população inteira observada, não uma amostra. ``populacional=False``
    devolve o desvio amostral (divisor N-1), mantido para comparação.
    """
    if populacional:
        if not valores:
            return 0.0
        return float(pstdev(valores))
    if len(valores) < 2:
        return 0.0
    return float(stdev(valores))


def mediana(valores: Sequence[float]) -> float:
    if not valores:
        return 0.0
    return float(median(valores))


def coeficiente_variacao(desvio: float, media_ref: float) -> Optional[float]:
    """CV como fração (0.30 == 30%). ``None`` quando a média é zero."""
    if media_ref is None or media_ref <= 0:
        return None
    return float(desvio) / float(media_ref)
