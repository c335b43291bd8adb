# drp/domain/validacao.py
"""
Validações de fronteira.

Tudo o que entra no motor passa por aqui antes de qualquer cálculo. As
funções levantam ``DadosInvalidosError`` com uma mensagem que identifica o
campo rejeitado; nenhuma delas tenta "consertar" o valor recebido.
"""

from __future__ import annotations

from math import isfinite
from typing import Iterable, Sequence, Tuple

from drp.config import PERIODOS_VALIDOS
from drp.domain.erros import DadosInvalidosError
from drp.domain.models import (
    GRANULARIDADE_DIARIA,
    GRANULARIDADE_MENSAL,
    MODO_PRIORIDADE,
    MODO_PROPORCIONAL,
    ObservacaoVenda,
    PoliticaReposicao,
    RequisicaoAlocacao,
)


def _numero(valor, campo: str) -> float:
    if valor is None or isinstance(valor, bool):
        raise DadosInvalidosError(f"{campo}: valor ausente ou inválido ({valor!r})")
    try:
        v = float(valor)
    except (TypeError, ValueError):
        raise DadosInvalidosError(f"{campo}: valor não numérico ({valor!r})")
    if not isfinite(v):
        raise DadosInvalidosError(f"{campo}: valor não finito ({valor!r})")
    return v


def validar_periodo(periodo_dias) -> int:
    if isinstance(periodo_dias, bool) or periodo_dias not in PERIODOS_VALIDOS:
        raise DadosInvalidosError(
            f"periodo_dias deve ser um de {PERIODOS_VALIDOS} (recebido {periodo_dias!r})"
        )
    return int(periodo_dias)


def validar_multiplo(multiplo) -> int:
    v = _numero(multiplo, "multiplo_venda")
    if v < 1 or v != int(v):
        raise DadosInvalidosError(f"multiplo_venda deve ser inteiro >= 1 (recebido {multiplo!r})")
    return int(v)


def validar_politica(politica: PoliticaReposicao) -> PoliticaReposicao:
    lead = _numero(politica.lead_time_dias, "lead_time_dias")
    seg = _numero(politica.dias_seguranca, "dias_seguranca")
    fator = _numero(politica.fator_pico, "fator_pico")
    if lead < 0:
        raise DadosInvalidosError("lead_time_dias não pode ser negativo")
    if seg < 0:
        raise DadosInvalidosError("dias_seguranca não pode ser negativo")
    if fator <= 0:
        raise DadosInvalidosError("fator_pico deve ser positivo")
    return politica


def validar_unidades(valor, campo: str) -> int:
    """Quantidade de estoque: finita, não negativa e em unidades inteiras."""
    v = _numero(valor, campo)
    if v < 0:
        raise DadosInvalidosError(f"{campo} não pode ser negativo ({valor!r})")
    if v != int(v):
        raise DadosInvalidosError(f"{campo} deve ser um número inteiro de unidades ({valor!r})")
    return int(v)


def validar_vendas(observacoes: Iterable[ObservacaoVenda]) -> Tuple[ObservacaoVenda, ...]:
    obs = tuple(observacoes)
    for o in obs:
        q = _numero(o.quantidade, f"quantidade de venda ({o.filial} {o.data})")
        if q < 0:
            raise DadosInvalidosError(
                f"quantidade de venda negativa em {o.filial} {o.data}: {o.quantidade!r}"
            )
    return obs


def validar_destinos(filial_origem: str, destinos: Sequence[str]) -> Tuple[str, ...]:
    destinos = tuple(destinos)
    if not destinos:
        raise DadosInvalidosError("nenhuma filial de destino informada")
    if len(set(destinos)) != len(destinos):
        raise DadosInvalidosError(f"filiais de destino repetidas: {destinos}")
    if filial_origem in destinos:
        raise DadosInvalidosError(f"filial de origem {filial_origem} não pode ser destino")
    return destinos


def validar_requisicao(req: RequisicaoAlocacao) -> RequisicaoAlocacao:
    if not req.codigo:
        raise DadosInvalidosError("codigo do produto não informado")
    validar_periodo(req.periodo_dias)
    validar_multiplo(req.multiplo_venda)
    validar_politica(req.politica)
    validar_destinos(req.filial_origem, req.filiais_destino)
    if req.modo not in (MODO_PROPORCIONAL, MODO_PRIORIDADE):
        raise DadosInvalidosError(f"modo de rateio desconhecido: {req.modo!r}")
    if req.granularidade not in (GRANULARIDADE_DIARIA, GRANULARIDADE_MENSAL):
        raise DadosInvalidosError(f"granularidade desconhecida: {req.granularidade!r}")
    if req.quantidade_origem is not None:
        validar_unidades(req.quantidade_origem, "quantidade_origem")
    return req
