# drp/domain/estoque_minimo.py
"""
Cálculo do estoque mínimo.

Duas abordagens convivem:

1. Sugestão por confiabilidade: cobre ``7`` (alta), ``14`` (media) ou
   ``21`` (baixa) dias da média diária do perfil.
2. Mínimo dinâmico (usado pelo batch): classe ABC por faturamento na
   filial (Pareto 80/95), fator de segurança e buffer por classe e fator de
   tendência comparando os últimos 90 dias com os 90 anteriores::

       minimo = ceil(media_180 × (lead_time + buffer) × seguranca × tendencia)

   com mínimo de 1 unidade quando houve venda no período.
"""

from __future__ import annotations

from datetime import date, timedelta
from math import ceil
from typing import Dict, Iterable, Mapping, Optional, Tuple

from drp.config import DEFAULTS
from drp.domain.models import ObservacaoVenda, PerfilDemanda, ResultadoEstoqueMinimo
from drp.domain.validacao import validar_vendas

DIAS_COBERTURA_CONFIABILIDADE = {"alta": 7, "media": 14, "baixa": 21}

LIMITE_CLASSE_A = 80.0
LIMITE_CLASSE_B = 95.0

FATOR_TENDENCIA_MIN = 0.5
FATOR_TENDENCIA_MAX = 2.0
FATOR_TENDENCIA_CRESCIMENTO = 1.5   # vendeu agora, não vendia antes


def sugerir_minimo_por_confiabilidade(perfil: PerfilDemanda) -> int:
    dias = DIAS_COBERTURA_CONFIABILIDADE.get(perfil.confiabilidade, 21)
    return int(ceil(round(perfil.media_diaria * dias, 6)))


def _na_faixa(o: ObservacaoVenda, inicio: date, fim: date) -> bool:
    d = o.data.date() if hasattr(o.data, "date") else o.data
    return inicio <= d <= fim


def faturamento(
    observacoes: Iterable[ObservacaoVenda], data_fim: date, janela_dias: int
) -> float:
    """Σ quantidade × valor_unitario na janela (valor ausente conta como 1)."""
    inicio = data_fim - timedelta(days=janela_dias - 1)
    total = 0.0
    for o in observacoes:
        if _na_faixa(o, inicio, data_fim):
            valor = o.valor_unitario if o.valor_unitario is not None else 1.0
            total += float(o.quantidade) * float(valor)
    return total


def classificar_abc(faturamento_por_produto: Mapping[str, float]) -> Dict[str, str]:
    """Curva ABC de uma filial pelo percentual acumulado do faturamento.

    O percentual acumulado inclui o próprio produto: ``<= 80`` → A,
    ``<= 95`` → B, demais → C. Produtos sem faturamento são C.
    """
    positivos = sorted(
        ((c, v) for c, v in faturamento_por_produto.items() if v > 0),
        key=lambda item: (-item[1], item[0]),
    )
    total = sum(v for _, v in positivos)
    classes = {c: "C" for c in faturamento_por_produto}
    acumulado = 0.0
    for codigo, valor in positivos:
        acumulado += valor
        pct = acumulado / total * 100.0
        if pct <= LIMITE_CLASSE_A:
            classes[codigo] = "A"
        elif pct <= LIMITE_CLASSE_B:
            classes[codigo] = "B"
        else:
            classes[codigo] = "C"
    return classes


def fator_tendencia(vendas_90: float, vendas_90_180: float) -> float:
    if vendas_90_180 <= 0:
        return FATOR_TENDENCIA_CRESCIMENTO if vendas_90 > 0 else 1.0
    fator = vendas_90 / vendas_90_180
    return max(FATOR_TENDENCIA_MIN, min(FATOR_TENDENCIA_MAX, fator))


def vendas_por_periodo(
    observacoes: Iterable[ObservacaoVenda], data_fim: date
) -> Tuple[float, float, float]:
    """(vendas_180, vendas_90, vendas_90_180) terminando em ``data_fim``."""
    inicio_180 = data_fim - timedelta(days=179)
    inicio_90 = data_fim - timedelta(days=89)
    v180 = v90 = 0.0
    for o in observacoes:
        if _na_faixa(o, inicio_180, data_fim):
            v180 += float(o.quantidade)
            if _na_faixa(o, inicio_90, data_fim):
                v90 += float(o.quantidade)
    return v180, v90, v180 - v90


def calcular_estoque_minimo(
    codigo: str,
    filial: str,
    observacoes: Iterable[ObservacaoVenda],
    data_fim: date,
    classe_abc: str = "C",
    lead_time_dias: float = DEFAULTS.lead_time_dias,
    parametros_classe: Optional[Mapping[str, Tuple[float, int]]] = None,
    minimo_anterior: Optional[int] = None,
) -> ResultadoEstoqueMinimo:
    parametros = parametros_classe or DEFAULTS.parametros_classe
    fator_seg, buffer = parametros.get(classe_abc, parametros["C"])

    obs = validar_vendas(observacoes)
    v180, v90, v90_180 = vendas_por_periodo(obs, data_fim)
    media = v180 / DEFAULTS.janela_minimo_dias
    tendencia = fator_tendencia(v90, v90_180)

    bruto = media * (float(lead_time_dias) + buffer) * fator_seg * tendencia
    minimo = int(ceil(round(bruto, 6)))
    if v180 > 0 and minimo < 1:
        minimo = 1

    variacao = None
    if minimo_anterior is not None and minimo_anterior > 0:
        variacao = (minimo - minimo_anterior) / minimo_anterior * 100.0

    return ResultadoEstoqueMinimo(
        codigo=codigo,
        filial=filial,
        estoque_minimo_calculado=minimo,
        classe_abc=classe_abc,
        media_vendas_diarias=media,
        lead_time_dias=float(lead_time_dias),
        buffer_dias=int(buffer),
        fator_seguranca=float(fator_seg),
        fator_tendencia=tendencia,
        vendas_180_dias=v180,
        vendas_90_dias=v90,
        vendas_90_180_dias=v90_180,
        estoque_minimo_anterior=minimo_anterior,
        variacao_percentual=variacao,
    )
