# drp/config.py
"""
Configurações globais e valores padrão do DRP (Distribution Requirements Planning).
"""

import os
from dataclasses import dataclass, field
from typing import Dict, Tuple


# Caminho padrão do banco de dados SQLite
DB_PATH = os.path.join(os.getcwd(), "drp.db")


# Cadastro de filiais (código -> nome)
FILIAIS_MAP: Dict[str, str] = {
    "00": "Petrolina",
    "01": "Juazeiro",
    "02": "Salgueiro",
    "05": "Bonfim",
    "06": "Picos",
}

# Centro de distribuição: não vende, apenas distribui
CD_FILIAL = "04"

# Filial de garantia: nunca é destino de DRP
FILIAL_GARANTIA = "03"

# Janelas de análise aceitas (dias)
PERIODOS_VALIDOS: Tuple[int, ...] = (30, 60, 90, 120, 180)


@dataclass
class DefaultConfig:
    """Valores padrão para parâmetros do sistema."""
    lead_time_dias: float = 30.0     # Dias até a próxima reposição chegar na filial
    dias_seguranca: float = 7.0      # Buffer de segurança em dias
    periodo_dias: int = 90           # Janela padrão de vendas
    fator_pico: float = 2.0          # Bucket > fator × mediana dos demais = pico
    cobertura_maxima_dias: float = 90.0   # acima disso o estoque da filial é excesso
    multiplo_venda: int = 1
    prioridade_filiais: Tuple[str, ...] = ("00", "01", "02", "05", "06")
    # Parâmetros do estoque mínimo dinâmico (por classe ABC)
    janela_minimo_dias: int = 180
    parametros_classe: Dict[str, Tuple[float, int]] = field(
        default_factory=lambda: {
            "A": (2.0, 5),   # (fator de segurança, buffer em dias)
            "B": (1.5, 3),
            "C": (1.2, 0),
        }
    )


# Instância global dos valores padrão
DEFAULTS = DefaultConfig()


def filiais_destino_padrao(filial_origem: str) -> Tuple[str, ...]:
    """Todas as filiais do cadastro, exceto a origem e a garantia."""
    return tuple(
        f for f in FILIAIS_MAP if f != filial_origem and f != FILIAL_GARANTIA
    )
