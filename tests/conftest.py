from collections import defaultdict
from datetime import date, timedelta

import pytest

from drp.domain.models import EstadoEstoque, ObservacaoVenda
from drp.infra import logger


DATA_FIM = date(2024, 6, 30)


class FonteFake:
    """Colaborador em memória com a mesma interface de FonteSQLite."""

    def __init__(self):
        self.vendas = defaultdict(list)          # (codigo, filial) -> [ObservacaoVenda]
        self.estoques = {}                       # (codigo, filial) -> EstadoEstoque
        self.grupos = {}                         # codigo -> [membros]
        self.descricoes = {}
        self.falhar_em = set()

    # --- montagem ---
    def venda(self, codigo, filial, quantidade, dias_atras=0, valor_unitario=None):
        d = DATA_FIM - timedelta(days=dias_atras)
        self.vendas[(codigo, filial)].append(ObservacaoVenda(filial, d, quantidade, valor_unitario))
        return self

    def venda_diaria(self, codigo, filial, quantidade, dias=90):
        for i in range(dias):
            self.venda(codigo, filial, quantidade, dias_atras=i)
        return self

    def estoque(self, codigo, filial, atual=0, minimo=0):
        self.estoques[(codigo, filial)] = EstadoEstoque(codigo, filial, atual, minimo)
        return self

    def grupo(self, *codigos):
        for c in codigos:
            self.grupos[c] = [o for o in codigos if o != c]
        return self

    # --- FonteDados ---
    def get_sales(self, codigo, filial, periodo_dias, data_fim):
        if codigo in self.falhar_em:
            raise ConnectionError(f"falha simulada em {codigo}")
        inicio = data_fim - timedelta(days=periodo_dias - 1)
        return [o for o in self.vendas[(codigo, filial)] if inicio <= o.data <= data_fim]

    def get_stock(self, codigo, filial):
        return self.estoques.get((codigo, filial), EstadoEstoque(codigo, filial))

    def get_substitute_group(self, codigo):
        return list(self.grupos.get(codigo, []))

    def get_description(self, codigo):
        return self.descricoes.get(codigo)


@pytest.fixture
def fonte():
    return FonteFake()


@pytest.fixture
def data_fim():
    return DATA_FIM


@pytest.fixture(autouse=True)
def _sem_logs(monkeypatch):
    monkeypatch.setattr(logger, "ENABLE_LOGGING", False)
    monkeypatch.setattr(logger, "ENABLE_OUTPUT", False)
