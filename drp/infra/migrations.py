# drp/infra/migrations.py
"""
Migrações de schema usando PRAGMA user_version.

V1: tabelas base (params, produto, venda, estoque, combinado)
V2: estoque mínimo dinâmico (valor ativo + histórico de alterações)
"""

from __future__ import annotations

from typing import List
from .db import connect


SCHEMA_V1: List[str] = [
    # Parâmetros K/V
    """
    CREATE TABLE IF NOT EXISTS params (
        chave TEXT PRIMARY KEY,
        valor TEXT
    );
    """,
    # Cadastro de produtos e configuração DRP por produto
    """
    CREATE TABLE IF NOT EXISTS produto (
        codigo TEXT PRIMARY KEY,
        descricao TEXT,
        multiplo_venda INTEGER NOT NULL DEFAULT 1,
        ativo INTEGER NOT NULL DEFAULT 1
    );
    """,
    # Razão de vendas (somente leitura para o motor)
    """
    CREATE TABLE IF NOT EXISTS venda (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        codigo TEXT NOT NULL,
        filial TEXT NOT NULL,
        data TEXT NOT NULL,           -- YYYY-MM-DD
        quantidade REAL NOT NULL,
        valor_unitario REAL
    );
    """,
    # Posição de estoque por filial
    """
    CREATE TABLE IF NOT EXISTS estoque (
        codigo TEXT NOT NULL,
        filial TEXT NOT NULL,
        estoque_atual REAL NOT NULL DEFAULT 0,
        estoque_minimo REAL NOT NULL DEFAULT 0,
        PRIMARY KEY (codigo, filial)
    );
    """,
    # Grupos de combinados: cada produto em no máximo um grupo
    """
    CREATE TABLE IF NOT EXISTS combinado (
        codigo TEXT PRIMARY KEY,
        codigo_grupo TEXT NOT NULL
    );
    """,
]


SCHEMA_V2: List[str] = [
    """
    CREATE TABLE IF NOT EXISTS estoque_minimo (
        codigo TEXT NOT NULL,
        filial TEXT NOT NULL,
        estoque_minimo_calculado INTEGER,
        estoque_minimo_manual INTEGER,
        estoque_minimo_ativo INTEGER NOT NULL DEFAULT 0,
        classe_abc TEXT,
        fator_tendencia REAL,
        media_vendas_diarias REAL,
        data_calculo TEXT,
        PRIMARY KEY (codigo, filial)
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS estoque_minimo_historico (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        codigo TEXT NOT NULL,
        filial TEXT NOT NULL,
        estoque_minimo_anterior INTEGER,
        estoque_minimo_novo INTEGER,
        origem TEXT NOT NULL,         -- 'calculo' | 'manual'
        data_alteracao TEXT NOT NULL
    );
    """,
]


def _apply(conn, scripts: List[str]) -> None:
    for sql in scripts:
        conn.executescript(sql)


def apply_migrations(db_path: str) -> None:
    """Aplica migrações incrementais de acordo com PRAGMA user_version."""
    with connect(db_path) as conn:
        ver = conn.execute("PRAGMA user_version;").fetchone()[0] or 0

        if ver < 1:
            _apply(conn, SCHEMA_V1)
            conn.execute("PRAGMA user_version = 1;")
            ver = 1

        if ver < 2:
            _apply(conn, SCHEMA_V2)
            conn.execute("PRAGMA user_version = 2;")
            ver = 2
