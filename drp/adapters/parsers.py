"""
Utilidades de parsing para valores lidos de planilhas.

As exportações do ERP trazem números no formato brasileiro ("1.234,50"),
às vezes acompanhados de unidade ("12 UN - Unidade"), e códigos que o
Excel converte em número ("1.0" no lugar de "01"). As funções abaixo
normalizam esses valores antes da gravação no banco.
"""

from __future__ import annotations

import re
from typing import Any, Optional

_NUM_RE = re.compile(r"[-+]?\d[\d.,]*")


def parse_numero(txt: Any) -> Optional[float]:
    """Interpreta um número em formato brasileiro ou internacional.

    Exemplos:
        "1.234,50"        → 1234.5
        "1,5"             → 1.5
        "1234.5"          → 1234.5
        "12 UN - Unidade" → 12.0
        ""                → None

    Regras:
        - Com vírgula e ponto, o último separador é o decimal.
        - Só vírgula: vírgula decimal.
        - Só pontos: mais de um ponto, ou grupo final com 3 dígitos
          precedido de 1 a 3 dígitos ("1.234"), é separador de milhar.
    """
    if txt is None:
        return None
    if isinstance(txt, (int, float)) and not isinstance(txt, bool):
        return float(txt)
    s = str(txt).strip()
    if not s:
        return None
    m = _NUM_RE.search(s)
    if not m:
        return None
    num = m.group(0).rstrip(".,")
    if "," in num and "." in num:
        if num.rfind(",") > num.rfind("."):
            num = num.replace(".", "").replace(",", ".")
        else:
            num = num.replace(",", "")
    elif "," in num:
        num = num.replace(".", "").replace(",", ".")
    elif num.count(".") > 1 or re.fullmatch(r"[-+]?\d{1,3}\.\d{3}", num):
        num = num.replace(".", "")
    try:
        return float(num)
    except ValueError:
        return None


def parse_codigo(txt: Any) -> Optional[str]:
    """Código de produto como texto, sem o ".0" que o Excel acrescenta."""
    if txt is None:
        return None
    s = str(txt).strip()
    if not s or s.lower() in {"nan", "none", "<na>"}:
        return None
    if re.fullmatch(r"\d+\.0+", s):
        s = s.split(".", 1)[0]
    return s


def parse_codigo_filial(txt: Any) -> Optional[str]:
    """Código de filial com dois dígitos ("1" → "01", "0.0" → "00")."""
    s = parse_codigo(txt)
    if s is None:
        return None
    return s.zfill(2) if s.isdigit() else s
