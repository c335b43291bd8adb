# drp/usecases/sugestao_minimo.py
"""
Caso de uso: sugerir estoque mínimo pela confiabilidade da média.

Para cada filial, calcula o perfil de demanda da janela e sugere
``ceil(media_diaria × dias)`` com 7/14/21 dias para confiabilidade
alta/media/baixa.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional, Sequence

from drp.config import DEFAULTS, FILIAIS_MAP
from drp.domain.contratos import FonteDados
from drp.domain.estoque_minimo import DIAS_COBERTURA_CONFIABILIDADE, sugerir_minimo_por_confiabilidade
from drp.domain.perfil_demanda import perfil_demanda
from drp.infra.logger import log_system_event


def run_sugestao_minimo(
    fonte: FonteDados,
    codigo: str,
    filiais: Optional[Sequence[str]] = None,
    periodo_dias: int = DEFAULTS.periodo_dias,
    data_referencia: Optional[date] = None,
) -> List[Dict[str, Any]]:
    data_fim = data_referencia or date.today()
    log_system_event("sugestao_minimo_start", {"codigo": codigo, "periodo_dias": periodo_dias})
    out: List[Dict[str, Any]] = []
    for filial in filiais or tuple(FILIAIS_MAP):
        perfil = perfil_demanda(
            fonte.get_sales(codigo, filial, periodo_dias, data_fim),
            periodo_dias,
            data_fim,
            codigo,
            filial,
        )
        estado = fonte.get_stock(codigo, filial)
        out.append(
            {
                "filial": filial,
                "media_diaria": perfil.media_diaria,
                "coeficiente_variacao": perfil.coeficiente_variacao,
                "confiabilidade": perfil.confiabilidade,
                "dias_cobertura": DIAS_COBERTURA_CONFIABILIDADE[perfil.confiabilidade],
                "estoque_minimo_atual": estado.estoque_minimo,
                "estoque_minimo_sugerido": sugerir_minimo_por_confiabilidade(perfil),
            }
        )
    return out
