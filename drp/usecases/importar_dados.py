# drp/usecases/importar_dados.py
"""
UC: importar planilhas do ERP para o banco do DRP.

Tipos aceitos:
- vendas      -> tabela ``venda`` (acrescenta linhas)
- estoque     -> tabela ``estoque`` (upsert por produto/filial)
- combinados  -> tabela ``combinado`` (upsert por produto)
- config      -> tabela ``produto`` (descrição, múltiplo de venda, ativo)
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List

from drp.adapters.planilhas import (
    load_combinados,
    load_config_produtos,
    load_estoque,
    load_vendas,
)
from drp.config import DB_PATH
from drp.infra.logger import log_file_operation, log_system_event, print_system
from drp.infra.migrations import apply_migrations
from drp.infra.repositories import CombinadoRepo, EstoqueRepo, ProdutoRepo, VendaRepo

TIPOS_IMPORTACAO = ("vendas", "estoque", "combinados", "config")


def _gravar(tipo: str, rows: List[Dict[str, Any]], db_path: str) -> None:
    if tipo == "vendas":
        VendaRepo(db_path).insert_many(rows)
    elif tipo == "estoque":
        EstoqueRepo(db_path).upsert(rows)
    elif tipo == "combinados":
        CombinadoRepo(db_path).upsert(rows)
    else:
        ProdutoRepo(db_path).upsert(rows)


_LOADERS: Dict[str, Callable[[str], List[Dict[str, Any]]]] = {
    "vendas": load_vendas,
    "estoque": load_estoque,
    "combinados": load_combinados,
    "config": load_config_produtos,
}


def run_importar(tipo: str, path: str, db_path: str = DB_PATH) -> Dict[str, Any]:
    """Lê a planilha ``path`` e grava as linhas válidas conforme o ``tipo``."""
    if tipo not in _LOADERS:
        raise ValueError(f"tipo de importação desconhecido: {tipo!r} (use {', '.join(TIPOS_IMPORTACAO)})")
    log_system_event("importar_start", {"tipo": tipo, "file_path": path})
    log_file_operation("import", path)
    print_system(f"=== Importar {tipo.upper()} ===")

    try:
        apply_migrations(db_path)
        rows = _LOADERS[tipo](path)
        _gravar(tipo, rows, db_path)
    except Exception as e:
        log_system_event("importar_error", {"tipo": tipo, "file_path": path, "error": str(e)}, level="error")
        raise

    log_file_operation("import", path, rows_processed=len(rows), tipo=tipo)
    return {"tipo": tipo, "arquivo": path, "linhas_importadas": len(rows)}
