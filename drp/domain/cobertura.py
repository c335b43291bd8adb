# drp/domain/cobertura.py
"""
Giro e cobertura do estoque de uma filial.

- Frequência de saída: dias distintos com venda na janela, em % do período
  (>= 70 alta, >= 40 media, > 0 baixa, senão sem_saida).
- Cobertura: quantos dias o estoque atual dura na média diária ajustada.
- Situação do estoque: ruptura / normal / excesso comparando o estoque com a
  meta e a cobertura com os dias de segurança e a cobertura máxima.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable, Optional

from drp.config import DEFAULTS
from drp.domain.models import (
    ESTOQUE_EXCESSO_ALERTA,
    ESTOQUE_EXCESSO_CRITICO,
    ESTOQUE_NORMAL,
    ESTOQUE_RUPTURA_ALERTA,
    ESTOQUE_RUPTURA_CRITICO,
    FrequenciaSaida,
    ObservacaoVenda,
    PoliticaReposicao,
)
from drp.domain.perfil_demanda import inicio_janela

LIMITE_FREQUENCIA_ALTA = 70.0
LIMITE_FREQUENCIA_MEDIA = 40.0


def _dia(valor) -> date:
    return valor.date() if hasattr(valor, "date") else valor


def classificar_frequencia(percentual_dias: float, dias_com_saida: int) -> str:
    if dias_com_saida <= 0:
        return "sem_saida"
    if percentual_dias >= LIMITE_FREQUENCIA_ALTA:
        return "alta"
    if percentual_dias >= LIMITE_FREQUENCIA_MEDIA:
        return "media"
    return "baixa"


def frequencia_saida(
    observacoes: Iterable[ObservacaoVenda], periodo_dias: int, data_fim: date
) -> FrequenciaSaida:
    """Conta os dias distintos com venda (> 0) dentro da janela."""
    data_fim = _dia(data_fim)
    inicio = inicio_janela(periodo_dias, data_fim)
    dias = {
        _dia(o.data)
        for o in observacoes
        if float(o.quantidade) > 0 and inicio <= _dia(o.data) <= data_fim
    }
    percentual = len(dias) / periodo_dias * 100.0 if periodo_dias else 0.0
    return FrequenciaSaida(
        classe=classificar_frequencia(percentual, len(dias)),
        dias_com_saida=len(dias),
        periodo_dias=periodo_dias,
        percentual_dias=round(percentual, 1),
    )


def cobertura_dias(estoque_atual: float, media_diaria: float) -> Optional[float]:
    """Dias de venda cobertos pelo estoque; ``None`` sem demanda."""
    if media_diaria <= 0:
        return None
    return float(estoque_atual) / float(media_diaria)


def classificar_estoque(
    estoque_atual: float,
    meta: int,
    media_diaria: float,
    politica: PoliticaReposicao,
    cobertura_maxima_dias: float = DEFAULTS.cobertura_maxima_dias,
) -> str:
    """Situação do estoque atual da filial.

    Sem demanda a única referência é a meta (o mínimo configurado): abaixo
    dela é ruptura, acima é excesso.
    """
    cobertura = cobertura_dias(estoque_atual, media_diaria)
    if cobertura is None:
        if meta > 0 and estoque_atual <= 0:
            return ESTOQUE_RUPTURA_CRITICO
        if estoque_atual < meta:
            return ESTOQUE_RUPTURA_ALERTA
        if estoque_atual > meta:
            return ESTOQUE_EXCESSO_ALERTA
        return ESTOQUE_NORMAL

    if estoque_atual <= 0 or cobertura < float(politica.dias_seguranca):
        return ESTOQUE_RUPTURA_CRITICO
    if estoque_atual < meta:
        return ESTOQUE_RUPTURA_ALERTA
    if cobertura > 2 * cobertura_maxima_dias:
        return ESTOQUE_EXCESSO_CRITICO
    if cobertura > cobertura_maxima_dias:
        return ESTOQUE_EXCESSO_ALERTA
    return ESTOQUE_NORMAL
