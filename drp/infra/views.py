# drp/infra/views.py
"""
Views auxiliares para consulta.

View criada:
- vw_estoque_filial: estoque por produto/filial com o mínimo efetivo e o
  grupo de combinados.

O mínimo efetivo é o manual, se houver; senão o calculado pelo batch quando
maior que zero; senão o mínimo do cadastro. As regras de negócio (meta,
necessidade, status) não ficam em SQL: são calculadas pelo domínio.
"""

from __future__ import annotations

from .db import connect


# Usado também por EstoqueRepo.get (aliases: e = estoque, em = estoque_minimo)
SQL_MINIMO_EFETIVO = """
    CASE
        WHEN em.estoque_minimo_manual IS NOT NULL THEN em.estoque_minimo_ativo
        WHEN em.estoque_minimo_ativo > 0 THEN em.estoque_minimo_ativo
        ELSE e.estoque_minimo
    END
"""


def create_views(db_path: str) -> None:
    with connect(db_path) as c:
        c.executescript(
            f"""
            DROP VIEW IF EXISTS vw_estoque_filial;
            CREATE VIEW vw_estoque_filial AS
            SELECT
                e.codigo,
                e.filial,
                e.estoque_atual,
                {SQL_MINIMO_EFETIVO} AS estoque_minimo,
                cb.codigo_grupo
            FROM estoque e
            LEFT JOIN estoque_minimo em
                   ON em.codigo = e.codigo AND em.filial = e.filial
            LEFT JOIN combinado cb
                   ON cb.codigo = e.codigo;
            """
        )

        c.executescript(
            """
            CREATE INDEX IF NOT EXISTS idx_venda_produto_filial ON venda(codigo, filial, data);
            CREATE INDEX IF NOT EXISTS idx_venda_filial_data    ON venda(filial, data);
            CREATE INDEX IF NOT EXISTS idx_combinado_grupo      ON combinado(codigo_grupo);
            """
        )
