# drp/infra/repositories.py
"""
Repositórios (DAO) para acesso aos dados do DRP no SQLite.

Classes:
- ParamsRepo
- ProdutoRepo
- VendaRepo
- EstoqueRepo
- CombinadoRepo
- EstoqueMinimoRepo
- FonteSQLite (implementa ``drp.domain.contratos.FonteDados``)
"""

from __future__ import annotations

from dataclasses import asdict, is_dataclass
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .db import connect
from .views import SQL_MINIMO_EFETIVO
from .logger import log_database_operation
from drp.config import DEFAULTS
from drp.domain.models import (
    EstadoEstoque,
    GrupoCombinado,
    ObservacaoVenda,
    PoliticaReposicao,
    ResultadoEstoqueMinimo,
)


# -------------------------
# Helpers
# -------------------------

def _as_dict(row: Any) -> Dict[str, Any]:
    if isinstance(row, dict):
        return row
    if is_dataclass(row):
        return asdict(row)
    raise TypeError("row must be dict or dataclass")


def _iso(d: Any) -> str:
    if isinstance(d, datetime):
        return d.date().isoformat()
    if isinstance(d, date):
        return d.isoformat()
    return str(d)[:10]


def _janela(periodo_dias: int, data_fim: date) -> Tuple[str, str]:
    inicio = data_fim - timedelta(days=periodo_dias - 1)
    return inicio.isoformat(), data_fim.isoformat()


# -------------------------
# Params
# -------------------------

class ParamsRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def set_many(self, items: Iterable[Tuple[str, str]]) -> None:
        items = list(items)
        with connect(self.db_path) as c:
            c.executemany(
                """
                INSERT INTO params (chave, valor)
                VALUES (?, ?)
                ON CONFLICT(chave) DO UPDATE SET valor=excluded.valor
                """,
                items,
            )
        log_database_operation("params", "UPSERT", len(items))

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        with connect(self.db_path) as c:
            row = c.execute("SELECT valor FROM params WHERE chave = ?", (key,)).fetchone()
            return row[0] if row else default

    def get_float(self, key: str, default: float) -> float:
        v = self.get(key, None)
        if v is None:
            return default
        try:
            return float(v)
        except ValueError:
            return default

    def politica(self) -> PoliticaReposicao:
        """Política de reposição com os overrides gravados em ``params``."""
        abater = (self.get("abater_combinados", "1") or "1").strip().lower()
        return PoliticaReposicao(
            lead_time_dias=self.get_float("lead_time_dias", DEFAULTS.lead_time_dias),
            dias_seguranca=self.get_float("dias_seguranca", DEFAULTS.dias_seguranca),
            fator_pico=self.get_float("fator_pico", DEFAULTS.fator_pico),
            abater_combinados=abater in {"1", "true", "sim", "s"},
        )


# -------------------------
# Produto
# -------------------------

class ProdutoRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def upsert(self, rows: Iterable[Dict[str, Any]]) -> None:
        rows = [_as_dict(r) for r in rows]
        with connect(self.db_path) as c:
            for r in rows:
                payload = {
                    "codigo": r["codigo"],
                    "descricao": r.get("descricao"),
                    "multiplo_venda": int(r.get("multiplo_venda") or 1),
                    "ativo": 1 if r.get("ativo") is None else int(r["ativo"]),
                }
                c.execute(
                    """
                    INSERT INTO produto (codigo, descricao, multiplo_venda, ativo)
                    VALUES (:codigo, :descricao, :multiplo_venda, :ativo)
                    ON CONFLICT(codigo) DO UPDATE SET
                        descricao=COALESCE(excluded.descricao, produto.descricao),
                        multiplo_venda=excluded.multiplo_venda,
                        ativo=excluded.ativo
                    """,
                    payload,
                )
        log_database_operation("produto", "UPSERT", len(rows))

    def get_all(self) -> List[Dict[str, Any]]:
        with connect(self.db_path) as c:
            cur = c.execute(
                "SELECT codigo, descricao, multiplo_venda, ativo FROM produto ORDER BY codigo"
            )
            cols = [d[0] for d in cur.description]
            return [dict(zip(cols, row)) for row in cur.fetchall()]

    def get(self, codigo: str) -> Optional[Dict[str, Any]]:
        with connect(self.db_path) as c:
            row = c.execute(
                "SELECT codigo, descricao, multiplo_venda, ativo FROM produto WHERE codigo = ?",
                (codigo,),
            ).fetchone()
            return dict(row) if row else None

    def multiplo_venda(self, codigo: str) -> int:
        p = self.get(codigo)
        if not p or not p.get("multiplo_venda"):
            return DEFAULTS.multiplo_venda
        return int(p["multiplo_venda"])

    def codigos_ativos(self) -> List[str]:
        with connect(self.db_path) as c:
            return [
                r[0]
                for r in c.execute("SELECT codigo FROM produto WHERE ativo = 1 ORDER BY codigo")
            ]


# -------------------------
# Vendas
# -------------------------

class VendaRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def insert_many(self, rows: Iterable[Dict[str, Any]]) -> int:
        payload = []
        for r in (_as_dict(r) for r in rows):
            payload.append(
                {
                    "codigo": r["codigo"],
                    "filial": r["filial"],
                    "data": _iso(r["data"]),
                    "quantidade": float(r["quantidade"]),
                    "valor_unitario": (
                        float(r["valor_unitario"]) if r.get("valor_unitario") is not None else None
                    ),
                }
            )
        if not payload:
            return 0
        with connect(self.db_path) as c:
            c.executemany(
                """
                INSERT INTO venda (codigo, filial, data, quantidade, valor_unitario)
                VALUES (:codigo, :filial, :data, :quantidade, :valor_unitario)
                """,
                payload,
            )
        log_database_operation("venda", "INSERT", len(payload))
        return len(payload)

    def vendas(self, codigo: str, filial: str, inicio: str, fim: str) -> List[ObservacaoVenda]:
        with connect(self.db_path) as c:
            cur = c.execute(
                """
                SELECT filial, data, quantidade, valor_unitario
                FROM venda
                WHERE codigo = ? AND filial = ? AND data BETWEEN ? AND ?
                ORDER BY data
                """,
                (codigo, filial, inicio, fim),
            )
            return [
                ObservacaoVenda(
                    filial=r["filial"],
                    data=date.fromisoformat(r["data"]),
                    quantidade=float(r["quantidade"]),
                    valor_unitario=r["valor_unitario"],
                )
                for r in cur.fetchall()
            ]

    def faturamento_por_produto(self, filial: str, inicio: str, fim: str) -> Dict[str, float]:
        """Σ quantidade × valor_unitario por produto na filial (valor ausente = 1)."""
        with connect(self.db_path) as c:
            cur = c.execute(
                """
                SELECT codigo, SUM(quantidade * COALESCE(valor_unitario, 1.0)) AS faturamento
                FROM venda
                WHERE filial = ? AND data BETWEEN ? AND ?
                GROUP BY codigo
                """,
                (filial, inicio, fim),
            )
            return {r["codigo"]: float(r["faturamento"] or 0.0) for r in cur.fetchall()}


# -------------------------
# Estoque
# -------------------------

class EstoqueRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def upsert(self, rows: Iterable[Dict[str, Any]]) -> None:
        rows = [_as_dict(r) for r in rows]
        with connect(self.db_path) as c:
            for r in rows:
                c.execute(
                    """
                    INSERT INTO estoque (codigo, filial, estoque_atual, estoque_minimo)
                    VALUES (:codigo, :filial, :estoque_atual, :estoque_minimo)
                    ON CONFLICT(codigo, filial) DO UPDATE SET
                        estoque_atual=excluded.estoque_atual,
                        estoque_minimo=excluded.estoque_minimo
                    """,
                    {
                        "codigo": r["codigo"],
                        "filial": r["filial"],
                        "estoque_atual": float(r.get("estoque_atual") or 0.0),
                        "estoque_minimo": float(r.get("estoque_minimo") or 0.0),
                    },
                )
        log_database_operation("estoque", "UPSERT", len(rows))

    def get(self, codigo: str, filial: str) -> EstadoEstoque:
        """Estoque da filial.

        O mínimo dinâmico prevalece sobre o do cadastro apenas quando é manual
        ou quando o cálculo deu mais que zero; um item sem venda no período
        mantém o mínimo cadastrado no ERP.
        """
        with connect(self.db_path) as c:
            row = c.execute(
                f"""
                SELECT e.estoque_atual AS estoque_atual,
                       {SQL_MINIMO_EFETIVO} AS estoque_minimo
                FROM estoque e
                LEFT JOIN estoque_minimo em
                       ON em.codigo = e.codigo AND em.filial = e.filial
                WHERE e.codigo = ? AND e.filial = ?
                """,
                (codigo, filial),
            ).fetchone()
            if row is None:
                em = c.execute(
                    "SELECT estoque_minimo_manual, estoque_minimo_ativo FROM estoque_minimo "
                    "WHERE codigo = ? AND filial = ?",
                    (codigo, filial),
                ).fetchone()
                minimo = 0.0
                if em is not None and (em[0] is not None or (em[1] or 0) > 0):
                    minimo = float(em[1])
                return EstadoEstoque(codigo, filial, 0.0, minimo)
            return EstadoEstoque(
                codigo, filial, float(row["estoque_atual"]), float(row["estoque_minimo"])
            )

    def pares_produto_filial(self) -> List[Tuple[str, str]]:
        with connect(self.db_path) as c:
            return [
                (r[0], r[1])
                for r in c.execute("SELECT codigo, filial FROM estoque ORDER BY codigo, filial")
            ]


# -------------------------
# Combinados
# -------------------------

class CombinadoRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def upsert(self, rows: Iterable[Dict[str, Any]]) -> None:
        rows = [_as_dict(r) for r in rows]
        with connect(self.db_path) as c:
            c.executemany(
                """
                INSERT INTO combinado (codigo, codigo_grupo)
                VALUES (:codigo, :codigo_grupo)
                ON CONFLICT(codigo) DO UPDATE SET codigo_grupo=excluded.codigo_grupo
                """,
                [{"codigo": r["codigo"], "codigo_grupo": r["codigo_grupo"]} for r in rows],
            )
        log_database_operation("combinado", "UPSERT", len(rows))

    def membros(self, codigo: str) -> List[str]:
        """Outros produtos do grupo de ``codigo`` (lista vazia se não houver grupo)."""
        with connect(self.db_path) as c:
            cur = c.execute(
                """
                SELECT outro.codigo
                FROM combinado proprio
                JOIN combinado outro ON outro.codigo_grupo = proprio.codigo_grupo
                WHERE proprio.codigo = ? AND outro.codigo <> proprio.codigo
                ORDER BY outro.codigo
                """,
                (codigo,),
            )
            return [r[0] for r in cur.fetchall()]

    def grupos(self) -> List[GrupoCombinado]:
        with connect(self.db_path) as c:
            cur = c.execute("SELECT codigo_grupo, codigo FROM combinado ORDER BY codigo_grupo, codigo")
            agrupado: Dict[str, List[str]] = {}
            for grupo, codigo in cur.fetchall():
                agrupado.setdefault(grupo, []).append(codigo)
        return [GrupoCombinado(g, tuple(c)) for g, c in agrupado.items()]


# -------------------------
# Estoque mínimo dinâmico
# -------------------------

class EstoqueMinimoRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def _historico(self, c, codigo, filial, anterior, novo, origem) -> None:
        c.execute(
            """
            INSERT INTO estoque_minimo_historico
                (codigo, filial, estoque_minimo_anterior, estoque_minimo_novo, origem, data_alteracao)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (codigo, filial, anterior, novo, origem, datetime.now().isoformat(timespec="seconds")),
        )

    def get(self, codigo: str, filial: str) -> Optional[Dict[str, Any]]:
        with connect(self.db_path) as c:
            row = c.execute(
                "SELECT * FROM estoque_minimo WHERE codigo = ? AND filial = ?",
                (codigo, filial),
            ).fetchone()
            return dict(row) if row else None

    def ativo(self, codigo: str, filial: str) -> Optional[int]:
        atual = self.get(codigo, filial)
        return int(atual["estoque_minimo_ativo"]) if atual else None

    def salvar_calculado(self, r: ResultadoEstoqueMinimo) -> int:
        """Grava o mínimo calculado. Um valor manual existente continua ativo.

        Returns:
            O estoque mínimo ativo após a gravação.
        """
        with connect(self.db_path) as c:
            atual = c.execute(
                "SELECT estoque_minimo_manual, estoque_minimo_ativo FROM estoque_minimo "
                "WHERE codigo = ? AND filial = ?",
                (r.codigo, r.filial),
            ).fetchone()
            manual = atual["estoque_minimo_manual"] if atual else None
            anterior = atual["estoque_minimo_ativo"] if atual else None
            ativo = int(manual) if manual is not None else r.estoque_minimo_calculado
            c.execute(
                """
                INSERT INTO estoque_minimo
                    (codigo, filial, estoque_minimo_calculado, estoque_minimo_manual,
                     estoque_minimo_ativo, classe_abc, fator_tendencia,
                     media_vendas_diarias, data_calculo)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(codigo, filial) DO UPDATE SET
                    estoque_minimo_calculado=excluded.estoque_minimo_calculado,
                    estoque_minimo_ativo=excluded.estoque_minimo_ativo,
                    classe_abc=excluded.classe_abc,
                    fator_tendencia=excluded.fator_tendencia,
                    media_vendas_diarias=excluded.media_vendas_diarias,
                    data_calculo=excluded.data_calculo
                """,
                (
                    r.codigo, r.filial, r.estoque_minimo_calculado, manual, ativo,
                    r.classe_abc, r.fator_tendencia, r.media_vendas_diarias,
                    datetime.now().isoformat(timespec="seconds"),
                ),
            )
            self._historico(c, r.codigo, r.filial, anterior, ativo, "calculo")
        log_database_operation("estoque_minimo", "UPSERT", 1, codigo=r.codigo, filial=r.filial)
        return ativo

    def definir_manual(self, codigo: str, filial: str, valor: Optional[int]) -> int:
        """Define (ou remove, com ``None``) o mínimo manual. Retorna o ativo."""
        with connect(self.db_path) as c:
            atual = c.execute(
                "SELECT estoque_minimo_calculado, estoque_minimo_ativo FROM estoque_minimo "
                "WHERE codigo = ? AND filial = ?",
                (codigo, filial),
            ).fetchone()
            calculado = atual["estoque_minimo_calculado"] if atual else None
            anterior = atual["estoque_minimo_ativo"] if atual else None
            ativo = int(valor) if valor is not None else int(calculado or 0)
            c.execute(
                """
                INSERT INTO estoque_minimo
                    (codigo, filial, estoque_minimo_manual, estoque_minimo_ativo)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(codigo, filial) DO UPDATE SET
                    estoque_minimo_manual=excluded.estoque_minimo_manual,
                    estoque_minimo_ativo=excluded.estoque_minimo_ativo
                """,
                (codigo, filial, valor, ativo),
            )
            self._historico(c, codigo, filial, anterior, ativo, "manual")
        log_database_operation("estoque_minimo", "UPDATE", 1, codigo=codigo, filial=filial, manual=valor)
        return ativo

    def historico(self, codigo: str, filial: str) -> List[Dict[str, Any]]:
        with connect(self.db_path) as c:
            cur = c.execute(
                """
                SELECT estoque_minimo_anterior, estoque_minimo_novo, origem, data_alteracao
                FROM estoque_minimo_historico
                WHERE codigo = ? AND filial = ?
                ORDER BY id
                """,
                (codigo, filial),
            )
            return [dict(r) for r in cur.fetchall()]


# -------------------------
# Colaborador do motor
# -------------------------

class FonteSQLite:
    """Fonte de dados do motor DRP sobre o banco SQLite."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        self.vendas = VendaRepo(db_path)
        self.estoques = EstoqueRepo(db_path)
        self.combinados = CombinadoRepo(db_path)
        self.produtos = ProdutoRepo(db_path)

    def get_sales(self, codigo: str, filial: str, periodo_dias: int, data_fim: date) -> List[ObservacaoVenda]:
        inicio, fim = _janela(periodo_dias, data_fim)
        return self.vendas.vendas(codigo, filial, inicio, fim)

    def get_stock(self, codigo: str, filial: str) -> EstadoEstoque:
        return self.estoques.get(codigo, filial)

    def get_substitute_group(self, codigo: str) -> List[str]:
        return self.combinados.membros(codigo)

    def get_description(self, codigo: str) -> Optional[str]:
        p = self.produtos.get(codigo)
        return p.get("descricao") if p else None
