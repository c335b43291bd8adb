# drp/domain/perfil_demanda.py
"""
Perfil de demanda de um produto em uma filial.

A partir das vendas de uma janela de ``W`` dias terminando em ``data_fim``
(inclusive) calcula total, média diária, desvio padrão, coeficiente de
variação e a confiabilidade da média.

Regras fixadas:
- ``media_diaria = total_vendas / W`` independentemente da granularidade.
- O desvio é o **populacional** da série de buckets.
- ``CV = desvio / média dos buckets``; com buckets diários a média dos
  buckets é a própria ``media_diaria``.
- Confiabilidade: CV < 0.30 → ``alta``; 0.30 <= CV <= 0.50 → ``media``;
  CV > 0.50 (ou sem média) → ``baixa``.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional, Sequence, Tuple

from drp.domain.erros import DadosInvalidosError
from drp.domain.estatistica import coeficiente_variacao, desvio_padrao, media
from drp.domain.models import (
    GRANULARIDADE_DIARIA,
    GRANULARIDADE_MENSAL,
    ObservacaoVenda,
    PerfilDemanda,
)
from drp.domain.validacao import validar_periodo, validar_vendas

LIMITE_ALTA = 0.30
LIMITE_MEDIA = 0.50


def _como_data(valor) -> date:
    if isinstance(valor, datetime):
        return valor.date()
    return valor


def inicio_janela(periodo_dias: int, data_fim: date) -> date:
    return data_fim - timedelta(days=periodo_dias - 1)


def _meses_janela(inicio: date, fim: date) -> List[Tuple[int, int]]:
    meses = []
    ano, mes = inicio.year, inicio.month
    while (ano, mes) <= (fim.year, fim.month):
        meses.append((ano, mes))
        mes += 1
        if mes > 12:
            ano, mes = ano + 1, 1
    return meses


def montar_buckets(
    observacoes: Iterable[ObservacaoVenda],
    periodo_dias: int,
    data_fim: date,
    granularidade: str = GRANULARIDADE_DIARIA,
) -> Tuple[float, ...]:
    """Agrupa as vendas da janela em buckets (dias ou meses), com zeros."""
    data_fim = _como_data(data_fim)
    inicio = inicio_janela(periodo_dias, data_fim)
    if granularidade == GRANULARIDADE_DIARIA:
        buckets = [0.0] * periodo_dias
        for o in observacoes:
            idx = (_como_data(o.data) - inicio).days
            if 0 <= idx < periodo_dias:
                buckets[idx] += float(o.quantidade)
        return tuple(buckets)
    if granularidade == GRANULARIDADE_MENSAL:
        meses = _meses_janela(inicio, data_fim)
        posicao = {m: i for i, m in enumerate(meses)}
        buckets = [0.0] * len(meses)
        for o in observacoes:
            d = _como_data(o.data)
            if inicio <= d <= data_fim:
                buckets[posicao[(d.year, d.month)]] += float(o.quantidade)
        return tuple(buckets)
    raise DadosInvalidosError(f"granularidade desconhecida: {granularidade!r}")


def classificar_confiabilidade(cv: Optional[float]) -> str:
    if cv is None:
        return "baixa"
    if cv < LIMITE_ALTA:
        return "alta"
    if cv <= LIMITE_MEDIA:
        return "media"
    return "baixa"


def perfil_de_buckets(
    codigo: str,
    filial: str,
    periodo_dias: int,
    buckets: Sequence[float],
    granularidade: str = GRANULARIDADE_DIARIA,
) -> PerfilDemanda:
    """Monta o perfil a partir de uma série de buckets já agregada."""
    buckets = tuple(float(b) for b in buckets)
    total = sum(buckets)
    media_diaria = total / periodo_dias if periodo_dias else 0.0
    desvio = desvio_padrao(buckets)
    cv = coeficiente_variacao(desvio, media(buckets)) if media_diaria > 0 else None
    return PerfilDemanda(
        codigo=codigo,
        filial=filial,
        periodo_dias=periodo_dias,
        granularidade=granularidade,
        buckets=buckets,
        total_vendas=total,
        media_diaria=media_diaria,
        desvio_padrao=desvio,
        coeficiente_variacao=cv,
        confiabilidade=classificar_confiabilidade(cv),
        media_ajustada=media_diaria,
    )


def perfil_demanda(
    observacoes: Iterable[ObservacaoVenda],
    periodo_dias: int,
    data_fim: date,
    codigo: str = "",
    filial: str = "",
    granularidade: str = GRANULARIDADE_DIARIA,
) -> PerfilDemanda:
    """Calcula o perfil de demanda de (produto, filial, janela).

    Sem observações na janela o resultado é um perfil vazio (total 0,
    média 0, CV ``None``, confiabilidade ``baixa``), não um erro.
    """
    periodo_dias = validar_periodo(periodo_dias)
    obs = validar_vendas(observacoes)
    buckets = montar_buckets(obs, periodo_dias, data_fim, granularidade)
    return perfil_de_buckets(codigo, filial, periodo_dias, buckets, granularidade)
