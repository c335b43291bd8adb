# drp/domain/erros.py
"""Exceções do motor DRP."""


class DadosInvalidosError(ValueError):
    """Entrada rejeitada na fronteira (janela, múltiplo, quantidades...)."""


class InvarianteVioladaError(RuntimeError):
    """Falha de lógica interna: o resultado violaria um invariante do rateio."""
