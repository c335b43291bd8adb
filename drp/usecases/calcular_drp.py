# drp/usecases/calcular_drp.py
"""
Caso de uso: calcular o DRP de um produto (ou de vários / de uma NF).

Fluxo:
1) Lê, via colaborador (``FonteDados``), estoque da origem e dos destinos,
   vendas da janela, grupo de combinados e descrições, montando um
   ``SnapshotProduto`` imutável.
2) Executa o motor puro (``drp.domain.motor.calcular_alocacao``).
3) Registra o resultado em ``alocacao.log``.

Obs.:
- Falhas são registradas e propagadas; no cálculo em lote (vários
  produtos / NF) a falha de um item não interrompe os demais.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Sequence

from drp.config import CD_FILIAL, DEFAULTS, filiais_destino_padrao
from drp.domain.contratos import FonteDados
from drp.domain.models import (
    GRANULARIDADE_DIARIA,
    MODO_PRIORIDADE,
    MODO_PROPORCIONAL,
    PoliticaReposicao,
    RequisicaoAlocacao,
    ResultadoAlocacao,
    SnapshotProduto,
)
from drp.domain.motor import calcular_alocacao
from drp.infra.logger import log_alocacao, log_system_event


def carregar_snapshot(
    fonte: FonteDados,
    codigo: str,
    filial_origem: str,
    filiais_destino: Sequence[str],
    periodo_dias: int,
    data_fim: date,
) -> SnapshotProduto:
    """Busca tudo o que o motor precisa para um produto, antes do cálculo."""
    filiais_grupo = list(filiais_destino) + [filial_origem]

    estoques = {f: fonte.get_stock(codigo, f) for f in filiais_destino}
    vendas = {f: tuple(fonte.get_sales(codigo, f, periodo_dias, data_fim)) for f in filiais_destino}

    grupo = tuple(m for m in fonte.get_substitute_group(codigo) if m != codigo)
    vendas_grupo = {}
    estoques_grupo = {}
    descricoes_grupo = {}
    for membro in grupo:
        vendas_grupo[membro] = {
            f: tuple(fonte.get_sales(membro, f, periodo_dias, data_fim)) for f in filiais_destino
        }
        estoques_grupo[membro] = {f: fonte.get_stock(membro, f) for f in filiais_grupo}
        descricoes_grupo[membro] = fonte.get_description(membro)

    return SnapshotProduto(
        codigo=codigo,
        descricao=fonte.get_description(codigo),
        disponivel_origem=fonte.get_stock(codigo, filial_origem).estoque_atual,
        estoques=estoques,
        vendas=vendas,
        grupo=grupo,
        vendas_grupo=vendas_grupo,
        estoques_grupo=estoques_grupo,
        descricoes_grupo=descricoes_grupo,
    )


def _resumo(r: ResultadoAlocacao) -> Dict[str, Any]:
    return {
        "disponivel_origem": r.disponivel_origem,
        "necessidade_total": r.necessidade_total,
        "alocacao_total": r.alocacao_total,
        "deficit_total": r.deficit_total,
        "status": r.status,
        "tipo_calculo": r.tipo_calculo,
    }


def run_drp_produto(
    fonte: FonteDados,
    codigo: str,
    filial_origem: str = CD_FILIAL,
    filiais_destino: Optional[Sequence[str]] = None,
    periodo_dias: int = DEFAULTS.periodo_dias,
    politica: Optional[PoliticaReposicao] = None,
    multiplo_venda: int = DEFAULTS.multiplo_venda,
    modo: str = MODO_PROPORCIONAL,
    data_referencia: Optional[date] = None,
    quantidade_origem: Optional[float] = None,
    prioridade: Sequence[str] = DEFAULTS.prioridade_filiais,
    granularidade: str = GRANULARIDADE_DIARIA,
) -> ResultadoAlocacao:
    """Calcula o DRP de um produto a partir da ``filial_origem``."""
    destinos = tuple(filiais_destino) if filiais_destino else filiais_destino_padrao(filial_origem)
    data_fim = data_referencia or date.today()
    req = RequisicaoAlocacao(
        codigo=codigo,
        filial_origem=filial_origem,
        filiais_destino=destinos,
        periodo_dias=periodo_dias,
        politica=politica or PoliticaReposicao(),
        multiplo_venda=multiplo_venda,
        modo=modo,
        quantidade_origem=quantidade_origem,
        data_referencia=data_fim,
        prioridade=tuple(prioridade),
        granularidade=granularidade,
    )
    log_system_event("drp_produto_start", {"codigo": codigo, "origem": filial_origem, "modo": modo})

    try:
        snapshot = carregar_snapshot(fonte, codigo, filial_origem, destinos, periodo_dias, data_fim)
        resultado = calcular_alocacao(req, snapshot)
    except Exception as e:
        log_alocacao(codigo, filial_origem, {"destinos": destinos, "periodo_dias": periodo_dias}, error=str(e))
        log_system_event("drp_produto_error", {"codigo": codigo, "error": str(e)}, level="error")
        raise

    log_alocacao(codigo, filial_origem, _resumo(resultado))
    return resultado


def run_drp_produtos(
    fonte: FonteDados,
    codigos: Iterable[str],
    multiplos: Optional[Dict[str, int]] = None,
    **kwargs: Any,
) -> Dict[str, Any]:
    """Calcula vários produtos; falhas individuais são coletadas em ``erros``."""
    multiplos = multiplos or {}
    resultados: List[ResultadoAlocacao] = []
    erros: List[Dict[str, str]] = []
    for codigo in codigos:
        try:
            resultados.append(
                run_drp_produto(
                    fonte,
                    codigo,
                    multiplo_venda=multiplos.get(codigo, DEFAULTS.multiplo_venda),
                    **kwargs,
                )
            )
        except Exception as e:
            erros.append({"codigo": codigo, "erro": str(e)})
    log_system_event(
        "drp_produtos_done", {"processados": len(resultados), "erros": len(erros)}
    )
    return {"resultados": resultados, "erros": erros}


def run_drp_nf(
    fonte: FonteDados,
    itens_nf: Iterable[Dict[str, Any]],
    filial_origem: str = CD_FILIAL,
    **kwargs: Any,
) -> Dict[str, Any]:
    """DRP de uma nota fiscal de entrada.

    Cada item (``codigo``, ``quantidade`` e, opcionalmente,
    ``multiplo_venda``) é distribuído em modo ``prioridade`` usando a
    quantidade recebida como disponível na origem.
    """
    itens = list(itens_nf)
    log_system_event("drp_nf_start", {"itens": len(itens), "origem": filial_origem})
    resultados: List[ResultadoAlocacao] = []
    erros: List[Dict[str, str]] = []
    for item in itens:
        codigo = str(item["codigo"])
        try:
            resultados.append(
                run_drp_produto(
                    fonte,
                    codigo,
                    filial_origem=filial_origem,
                    modo=MODO_PRIORIDADE,
                    quantidade_origem=item["quantidade"],
                    multiplo_venda=int(item.get("multiplo_venda") or DEFAULTS.multiplo_venda),
                    **kwargs,
                )
            )
        except Exception as e:
            erros.append({"codigo": codigo, "erro": str(e)})
    log_system_event("drp_nf_done", {"processados": len(resultados), "erros": len(erros)})
    return {"resultados": resultados, "erros": erros}
