# drp/adapters/planilhas.py
"""
Importação de planilhas (XLSX/CSV) exportadas do ERP.

Essas funções:
- leem XLSX (openpyxl) ou CSV usando pandas;
- normalizam cabeçalhos (acentos, variações, sinônimos);
- retornam listas de dicionários com as chaves esperadas pelos repositórios.

Linhas sem código de produto (ou sem filial, quando exigida) são ignoradas.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from drp.adapters.parsers import parse_codigo, parse_codigo_filial, parse_numero


# ---------------------------
# utilitários de normalização
# ---------------------------

def _slug(s: str) -> str:
    """Normaliza cabeçalhos: minúsculas, sem acentos, sem não-alfanumérico."""
    if s is None:
        return ""
    s = str(s).strip().lower()
    acentos = dict(zip("áàâãäéèêëíìîïóòôõöúùûüç", "aaaaaeeeeiiiiooooouuuuc"))
    s = "".join(acentos.get(ch, ch) for ch in s)
    s = re.sub(r"[^a-z0-9]+", " ", s)
    return re.sub(r"\s+", " ", s).strip()


ALIASES = {
    "codigo": "codigo",
    "cod": "codigo",
    "cod produto": "codigo",
    "codigo produto": "codigo",
    "produto": "codigo",

    "filial": "filial",
    "cod filial": "filial",
    "loja": "filial",

    "data": "data",
    "data venda": "data",
    "data movimento": "data",

    "quantidade": "quantidade",
    "qtde": "quantidade",
    "qtd": "quantidade",
    "quantidade recebida": "quantidade",

    "valor unitario": "valor_unitario",
    "valor venda": "valor_unitario",
    "preco": "valor_unitario",
    "preco unitario": "valor_unitario",

    "estoque": "estoque_atual",
    "estoque atual": "estoque_atual",
    "saldo": "estoque_atual",

    "estoque minimo": "estoque_minimo",
    "minimo": "estoque_minimo",

    "grupo": "codigo_grupo",
    "codigo grupo": "codigo_grupo",
    "cod grupo": "codigo_grupo",
    "grupo combinado": "codigo_grupo",

    "descricao": "descricao",
    "nome": "descricao",

    "multiplo": "multiplo_venda",
    "multiplo venda": "multiplo_venda",
    "multiplo de venda": "multiplo_venda",

    "ativo": "ativo",
}


def _normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Renomeia colunas com base em sinônimos/variações."""
    new_cols = {col: ALIASES.get(_slug(col), _slug(col)) for col in df.columns}
    return df.rename(columns=new_cols)


def _safe_get(row, key) -> Optional[Any]:
    val = row.get(key)
    if val is None or pd.isna(val):
        return None
    return val


def _to_date_iso(val: Any) -> Optional[str]:
    """Converte valor para data ISO (YYYY-MM-DD) se possível."""
    if val is None:
        return None
    s = str(val).strip()
    if not s:
        return None
    iso = re.fullmatch(r"\d{4}-\d{2}-\d{2}.*", s) is not None
    d = pd.to_datetime(s[:10] if iso else s, dayfirst=not iso, errors="coerce")
    if pd.isna(d):
        return None
    return d.date().isoformat()


def _to_bool01(val: Any) -> int:
    if val is None:
        return 1
    s = str(val).strip().lower()
    if s in {"0", "false", "f", "nao", "não", "n", "no", "inativo"}:
        return 0
    return 1


def read_table(path: str) -> pd.DataFrame:
    """Lê XLSX ou CSV como texto, já com colunas normalizadas."""
    suffix = Path(path).suffix.lower()
    if suffix in {".xlsx", ".xlsm", ".xls"}:
        df = pd.read_excel(path, dtype="string")
    elif suffix in {".csv", ".txt"}:
        df = pd.read_csv(path, dtype="string", sep=None, engine="python")
    else:
        raise ValueError(f"formato de planilha não suportado: {path}")
    return _normalize_columns(df)


# ---------------------------
# loaders públicos
# ---------------------------

def load_vendas(path: str) -> List[Dict[str, Any]]:
    """Vendas: codigo, filial, data (ISO), quantidade, valor_unitario."""
    out: List[Dict[str, Any]] = []
    for _, row in read_table(path).iterrows():
        codigo = parse_codigo(_safe_get(row, "codigo"))
        filial = parse_codigo_filial(_safe_get(row, "filial"))
        data = _to_date_iso(_safe_get(row, "data"))
        quantidade = parse_numero(_safe_get(row, "quantidade"))
        if not codigo or not filial or not data or quantidade is None:
            continue
        out.append(
            {
                "codigo": codigo,
                "filial": filial,
                "data": data,
                "quantidade": quantidade,
                "valor_unitario": parse_numero(_safe_get(row, "valor_unitario")),
            }
        )
    return out


def load_estoque(path: str) -> List[Dict[str, Any]]:
    """Estoque: codigo, filial, estoque_atual, estoque_minimo."""
    out: List[Dict[str, Any]] = []
    for _, row in read_table(path).iterrows():
        codigo = parse_codigo(_safe_get(row, "codigo"))
        filial = parse_codigo_filial(_safe_get(row, "filial"))
        if not codigo or not filial:
            continue
        out.append(
            {
                "codigo": codigo,
                "filial": filial,
                "estoque_atual": parse_numero(_safe_get(row, "estoque_atual")) or 0.0,
                "estoque_minimo": parse_numero(_safe_get(row, "estoque_minimo")) or 0.0,
            }
        )
    return out


def load_combinados(path: str) -> List[Dict[str, Any]]:
    """Combinados: codigo, codigo_grupo."""
    out: List[Dict[str, Any]] = []
    for _, row in read_table(path).iterrows():
        codigo = parse_codigo(_safe_get(row, "codigo"))
        grupo = parse_codigo(_safe_get(row, "codigo_grupo"))
        if not codigo or not grupo:
            continue
        out.append({"codigo": codigo, "codigo_grupo": grupo})
    return out


def load_config_produtos(path: str) -> List[Dict[str, Any]]:
    """Cadastro DRP do produto: codigo, descricao, multiplo_venda, ativo."""
    out: List[Dict[str, Any]] = []
    for _, row in read_table(path).iterrows():
        codigo = parse_codigo(_safe_get(row, "codigo"))
        if not codigo:
            continue
        multiplo = parse_numero(_safe_get(row, "multiplo_venda"))
        descricao = _safe_get(row, "descricao")
        out.append(
            {
                "codigo": codigo,
                "descricao": str(descricao).strip() if descricao is not None else None,
                "multiplo_venda": int(multiplo) if multiplo and multiplo >= 1 else 1,
                "ativo": _to_bool01(_safe_get(row, "ativo")),
            }
        )
    return out


def load_itens_nf(path: str) -> List[Dict[str, Any]]:
    """Itens de uma NF de entrada: codigo, quantidade (recebida)."""
    out: List[Dict[str, Any]] = []
    for _, row in read_table(path).iterrows():
        codigo = parse_codigo(_safe_get(row, "codigo"))
        quantidade = parse_numero(_safe_get(row, "quantidade"))
        if not codigo or quantidade is None:
            continue
        out.append({"codigo": codigo, "quantidade": quantidade})
    return out
