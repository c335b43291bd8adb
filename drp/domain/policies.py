"""
Políticas de arredondamento das remessas ao múltiplo de venda.

Este módulo contém as regras aplicadas depois do rateio, quando o produto
só pode ser enviado em lotes de ``m`` unidades. O ajuste nunca faz a soma
das remessas ultrapassar o disponível na origem nem a remessa de uma filial
ultrapassar a sua necessidade.
"""

from __future__ import annotations

from typing import Dict, Mapping, Sequence

from drp.domain.alocacao import alocar, ordem_rateio
from drp.domain.models import MODO_PROPORCIONAL

MAX_PASSES = 2


def arredondar_multiplo(quantidade: int, multiplo: int, necessidade: int) -> int:
    """Arredonda ``quantidade`` para baixo ao múltiplo ``multiplo``.

    Regras:
        - ``quantidade <= 0`` → ``0``.
        - Se o arredondamento para baixo zerar uma remessa positiva, a
          remessa passa a ser ``min(multiplo, necessidade)``.

    Args:
        quantidade: Remessa bruta vinda do rateio.
        multiplo: Múltiplo de venda do produto (>= 1).
        necessidade: Necessidade da filial (teto da remessa).

    Returns:
        A remessa ajustada.
    """
    if quantidade <= 0:
        return 0
    if multiplo <= 1:
        return int(quantidade)
    abaixo = (int(quantidade) // multiplo) * multiplo
    if abaixo == 0:
        return min(multiplo, int(necessidade))
    return abaixo


def _arredondar_todos(
    alocacoes: Mapping[str, int], multiplo: int, necessidades: Mapping[str, int]
) -> Dict[str, int]:
    return {f: arredondar_multiplo(q, multiplo, necessidades[f]) for f, q in alocacoes.items()}


def ajustar_multiplos(
    necessidades: Mapping[str, int],
    alocacoes: Mapping[str, int],
    disponivel: int,
    multiplo: int,
    modo: str = MODO_PROPORCIONAL,
    prioridade: Sequence[str] = (),
) -> Dict[str, int]:
    """Ajusta as remessas do rateio ao múltiplo de venda.

    1. Arredonda cada remessa (ver ``arredondar_multiplo``).
    2. Se a soma passar do disponível, refaz o rateio usando as remessas
       arredondadas como necessidade (no máximo ``MAX_PASSES`` vezes).
    3. Persistindo o excesso, arredonda tudo para baixo e concede os lotes
       mínimos na ordem do rateio enquanto houver saldo.
    4. Lotes inteiros que sobrarem vão, em rodízio na ordem do rateio, para
       filiais que comportem um lote a mais sem passar da necessidade.
       Sobra menor que um lote fica na origem.
    """
    if multiplo <= 1:
        return dict(alocacoes)

    ordem = ordem_rateio(necessidades, modo, prioridade)
    ajustado = _arredondar_todos(alocacoes, multiplo, necessidades)

    passes = 0
    while sum(ajustado.values()) > disponivel and passes < MAX_PASSES:
        realocado = alocar(ajustado, disponivel, modo, prioridade)
        ajustado = _arredondar_todos(realocado, multiplo, necessidades)
        passes += 1

    if sum(ajustado.values()) > disponivel:
        ajustado = {f: (q // multiplo) * multiplo for f, q in alocacoes.items()}
        saldo = disponivel - sum(ajustado.values())
        for f in ordem:
            if ajustado[f] == 0 and alocacoes[f] > 0:
                lote = min(multiplo, necessidades[f])
                if lote <= saldo:
                    ajustado[f] = lote
                    saldo -= lote

    saldo = disponivel - sum(ajustado.values())
    distribuiu = True
    while saldo >= multiplo and distribuiu:
        distribuiu = False
        for f in ordem:
            if saldo < multiplo:
                break
            if ajustado[f] + multiplo <= necessidades[f]:
                ajustado[f] += multiplo
                saldo -= multiplo
                distribuiu = True
    return ajustado
