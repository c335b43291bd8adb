# drp/infra/db.py
"""
Conexão SQLite usada pelos repositórios do DRP.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from typing import Iterator


@contextmanager
def connect(db_path: str) -> Iterator[sqlite3.Connection]:
    """
    Abre uma conexão com ``row_factory = sqlite3.Row`` e chaves estrangeiras
    ativas. Faz commit ao sair do bloco e rollback se houver exceção.
    """
    conn = sqlite3.connect(db_path)
    try:
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON;")
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()
