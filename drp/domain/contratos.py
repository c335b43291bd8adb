# drp/domain/contratos.py
"""
Interface dos colaboradores externos consumidos pelo motor.

O motor não conhece banco de dados nem planilhas: a camada de casos de uso
recebe um objeto que satisfaça ``FonteDados`` (na prática
``drp.infra.repositories.FonteSQLite``; nos testes, um fake em memória).
"""

from __future__ import annotations

from datetime import date
from typing import List, Optional, Protocol

from drp.domain.models import EstadoEstoque, ObservacaoVenda


class FonteDados(Protocol):
    def get_sales(
        self, codigo: str, filial: str, periodo_dias: int, data_fim: date
    ) -> List[ObservacaoVenda]:
        """Vendas do produto na filial dentro da janela que termina em ``data_fim``."""
        ...

    def get_stock(self, codigo: str, filial: str) -> EstadoEstoque:
        """Estoque atual e mínimo; produto sem cadastro na filial retorna zeros."""
        ...

    def get_substitute_group(self, codigo: str) -> List[str]:
        """Demais códigos do grupo combinado (sem o próprio ``codigo``)."""
        ...

    def get_description(self, codigo: str) -> Optional[str]:
        ...
