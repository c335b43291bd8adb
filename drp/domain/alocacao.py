# drp/domain/alocacao.py
"""
Motor de rateio: distribui uma quantidade finita da origem entre as filiais.

Modos:
- ``proporcional``: com oferta suficiente cada filial recebe a necessidade
  inteira. Na falta, cada filial recebe ``floor(nec_i / total × origem)`` e
  o resto é entregue unidade a unidade por necessidade decrescente
  (desempate pela prioridade configurada e depois pela ordem de entrada),
  apenas para filiais ainda abaixo da necessidade. O total distribuído é
  igual à origem.
- ``prioridade``: filiais na ordem configurada (as não listadas ao final,
  na ordem de entrada); cada uma recebe ``min(nec_i, restante)``.

Todas as quantidades aqui são inteiras.
"""

from __future__ import annotations

from typing import Dict, List, Mapping, Sequence

from drp.domain.erros import DadosInvalidosError, InvarianteVioladaError
from drp.domain.models import (
    MODO_PRIORIDADE,
    MODO_PROPORCIONAL,
    STATUS_DEFICIT,
    STATUS_OK,
    STATUS_RATEIO,
    STATUS_SEM_HISTORICO,
)


def ordem_prioridade(filiais: Sequence[str], prioridade: Sequence[str]) -> List[str]:
    filiais = list(filiais)
    listadas = [f for f in prioridade if f in filiais]
    return listadas + [f for f in filiais if f not in listadas]


def ordem_rateio(
    necessidades: Mapping[str, int],
    modo: str,
    prioridade: Sequence[str] = (),
) -> List[str]:
    """Ordem em que as filiais disputam unidades/lotes remanescentes."""
    por_prioridade = ordem_prioridade(list(necessidades), prioridade)
    if modo == MODO_PRIORIDADE:
        return por_prioridade
    posicao = {f: i for i, f in enumerate(por_prioridade)}
    return sorted(necessidades, key=lambda f: (-necessidades[f], posicao[f]))


def ratear_proporcional(
    necessidades: Mapping[str, int],
    disponivel: int,
    prioridade: Sequence[str] = (),
) -> Dict[str, int]:
    total = sum(necessidades.values())
    if total <= disponivel:
        return dict(necessidades)

    # floor(nec / total × origem) em aritmética inteira
    alocado = {f: n * disponivel // total for f, n in necessidades.items()}
    resto = disponivel - sum(alocado.values())
    ordem = ordem_rateio(necessidades, MODO_PROPORCIONAL, prioridade)
    while resto > 0:
        for f in ordem:
            if resto == 0:
                break
            if alocado[f] < necessidades[f]:
                alocado[f] += 1
                resto -= 1
    return alocado


def ratear_prioridade(
    necessidades: Mapping[str, int],
    disponivel: int,
    prioridade: Sequence[str] = (),
) -> Dict[str, int]:
    restante = disponivel
    alocado = {f: 0 for f in necessidades}
    for f in ordem_prioridade(list(necessidades), prioridade):
        q = min(necessidades[f], restante)
        alocado[f] = q
        restante -= q
    return alocado


def alocar(
    necessidades: Mapping[str, int],
    disponivel: int,
    modo: str = MODO_PROPORCIONAL,
    prioridade: Sequence[str] = (),
) -> Dict[str, int]:
    """Rateia ``disponivel`` entre as filiais conforme o modo."""
    if disponivel < 0:
        raise DadosInvalidosError(f"disponível na origem não pode ser negativo ({disponivel})")
    if modo == MODO_PROPORCIONAL:
        return ratear_proporcional(necessidades, disponivel, prioridade)
    if modo == MODO_PRIORIDADE:
        return ratear_prioridade(necessidades, disponivel, prioridade)
    raise DadosInvalidosError(f"modo de rateio desconhecido: {modo!r}")


def status_filial(necessidade: int, alocacao: int, modo: str, planejavel: bool = True) -> str:
    if not planejavel:
        return STATUS_SEM_HISTORICO
    if necessidade <= 0 or alocacao >= necessidade:
        return STATUS_OK
    if modo == MODO_PRIORIDADE:
        return STATUS_DEFICIT
    return STATUS_RATEIO if alocacao > 0 else STATUS_DEFICIT


def status_requisicao(necessidade_total: int, disponivel: int, planejavel: bool = True) -> str:
    """``planejavel=False`` quando nenhuma filial de destino pôde ser planejada."""
    if not planejavel:
        return STATUS_SEM_HISTORICO
    if necessidade_total <= disponivel:
        return STATUS_OK
    if disponivel <= 0:
        return STATUS_DEFICIT
    return STATUS_RATEIO


def deficit_total(necessidade_total: int, disponivel: int) -> int:
    return max(0, necessidade_total - disponivel)


def verificar_invariantes(
    necessidades: Mapping[str, int],
    alocacoes: Mapping[str, int],
    disponivel: int,
) -> None:
    """Levanta ``InvarianteVioladaError`` se o rateio for inconsistente."""
    total = sum(alocacoes.values())
    if total > disponivel:
        raise InvarianteVioladaError(
            f"alocação total {total} excede o disponível na origem {disponivel}"
        )
    for f, q in alocacoes.items():
        if q < 0:
            raise InvarianteVioladaError(f"alocação negativa para a filial {f}: {q}")
        if q > necessidades.get(f, 0):
            raise InvarianteVioladaError(
                f"alocação {q} da filial {f} excede a necessidade {necessidades.get(f, 0)}"
            )
