# drp/domain/sugestoes.py
"""Sugestões de combinados quando sobra déficit após o rateio."""

from __future__ import annotations

from typing import Iterable, Mapping, Optional, Tuple

from drp.domain.models import STATUS_DEFICIT, EstadoEstoque, SugestaoCombinado


def deve_sugerir(status_filiais: Iterable[str], deficit_total: int) -> bool:
    return deficit_total > 0 or any(s == STATUS_DEFICIT for s in status_filiais)


def sugerir_combinados(
    codigo: str,
    grupo: Iterable[str],
    estoques_origem: Mapping[str, EstadoEstoque],
    descricoes: Mapping[str, Optional[str]],
) -> Tuple[SugestaoCombinado, ...]:
    """Lista os outros membros do grupo com estoque na origem.

    Ordenação: maior estoque primeiro, depois código. Nada é substituído
    automaticamente; a lista é apenas informativa para o comprador.
    """
    sugestoes = []
    for membro in grupo:
        if membro == codigo:
            continue
        est = estoques_origem.get(membro)
        if est is None or est.estoque_atual <= 0:
            continue
        sugestoes.append(SugestaoCombinado(membro, descricoes.get(membro), float(est.estoque_atual)))
    sugestoes.sort(key=lambda s: (-s.estoque_disponivel, s.codigo))
    return tuple(sugestoes)
