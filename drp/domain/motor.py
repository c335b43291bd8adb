# drp/domain/motor.py
"""
Pipeline completo do DRP para um produto.

perfil → picos → combinados (se preciso) → meta → rateio → múltiplo de
venda → sugestões de combinados (se houver déficit). Cada filial traz ainda
a frequência de saída e a situação do estoque (cobertura).

Função pura sobre um ``SnapshotProduto`` já carregado; a busca dos dados e
o log ficam na camada de casos de uso.
"""

from __future__ import annotations

from datetime import date
from typing import Dict, List

from drp.config import FILIAIS_MAP
from drp.domain.alocacao import (
    alocar,
    deficit_total,
    status_filial,
    status_requisicao,
    verificar_invariantes,
)
from drp.domain.cobertura import classificar_estoque, cobertura_dias, frequencia_saida
from drp.domain.combinados import resolver_demanda
from drp.domain.meta import calcular_meta, necessidade
from drp.domain.models import (
    TIPO_COMBINADO,
    TIPO_ESTOQUE_MINIMO,
    TIPO_SEM_HISTORICO,
    TIPO_VENDAS,
    EstadoEstoque,
    MetaFilial,
    PerfilDemanda,
    RequisicaoAlocacao,
    ResolucaoDemanda,
    ResultadoAlocacao,
    ResultadoFilial,
    SnapshotProduto,
)
from drp.domain.perfil_demanda import perfil_demanda
from drp.domain.picos import marcar_picos
from drp.domain.policies import ajustar_multiplos
from drp.domain.sugestoes import deve_sugerir, sugerir_combinados
from drp.domain.validacao import validar_requisicao, validar_unidades

# Precedência do tipo_calculo no nível do produto
_PRECEDENCIA_TIPO = (TIPO_VENDAS, TIPO_COMBINADO, TIPO_ESTOQUE_MINIMO, TIPO_SEM_HISTORICO)


def tipo_calculo_produto(tipos: List[str]) -> str:
    for tipo in _PRECEDENCIA_TIPO:
        if tipo in tipos:
            return tipo
    return TIPO_SEM_HISTORICO


def _resolver_filial(
    req: RequisicaoAlocacao,
    snapshot: SnapshotProduto,
    filial: str,
    data_fim: date,
) -> ResolucaoDemanda:
    fator = req.politica.fator_pico
    perfil = perfil_demanda(
        snapshot.vendas.get(filial, ()),
        req.periodo_dias,
        data_fim,
        req.codigo,
        filial,
        req.granularidade,
    )
    perfil = marcar_picos(perfil, fator)

    estoques_grupo = {}
    for membro in snapshot.grupo:
        est = snapshot.estoques_grupo.get(membro, {}).get(filial)
        if est is not None:
            estoques_grupo[membro] = est

    perfis_grupo: Dict[str, PerfilDemanda] = {}
    if perfil.total_vendas <= 0:
        for membro in snapshot.grupo:
            vendas = snapshot.vendas_grupo.get(membro, {}).get(filial, ())
            perfis_grupo[membro] = perfil_demanda(
                vendas, req.periodo_dias, data_fim, membro, filial, req.granularidade
            )
    return resolver_demanda(perfil, perfis_grupo, estoques_grupo, fator)


def calcular_alocacao(req: RequisicaoAlocacao, snapshot: SnapshotProduto) -> ResultadoAlocacao:
    """Executa o DRP de um produto e devolve o resultado imutável."""
    validar_requisicao(req)
    origem = req.quantidade_origem if req.quantidade_origem is not None else snapshot.disponivel_origem
    disponivel = validar_unidades(origem, "disponivel_origem")
    data_fim = req.data_referencia or date.today()

    estoques: Dict[str, EstadoEstoque] = {}
    resolucoes: Dict[str, ResolucaoDemanda] = {}
    metas: Dict[str, MetaFilial] = {}
    necessidades: Dict[str, int] = {}
    for filial in req.filiais_destino:
        est = snapshot.estoques.get(filial) or EstadoEstoque(req.codigo, filial)
        atual = validar_unidades(est.estoque_atual, f"estoque_atual ({filial})")
        resolucao = _resolver_filial(req, snapshot, filial, data_fim)
        meta = calcular_meta(resolucao, est, req.politica)
        estoques[filial] = est
        resolucoes[filial] = resolucao
        metas[filial] = meta
        necessidades[filial] = necessidade(meta.meta, atual)

    alocacoes = alocar(necessidades, disponivel, req.modo, req.prioridade)
    alocacoes = ajustar_multiplos(
        necessidades, alocacoes, disponivel, req.multiplo_venda, req.modo, req.prioridade
    )
    verificar_invariantes(necessidades, alocacoes, disponivel)

    filiais = []
    for filial in req.filiais_destino:
        est, meta, resolucao = estoques[filial], metas[filial], resolucoes[filial]
        filiais.append(
            ResultadoFilial(
                filial=filial,
                nome=FILIAIS_MAP.get(filial, filial),
                estoque_atual=float(est.estoque_atual),
                estoque_minimo=float(est.estoque_minimo),
                meta=meta.meta,
                necessidade=necessidades[filial],
                alocacao_sugerida=alocacoes[filial],
                status=status_filial(
                    necessidades[filial], alocacoes[filial], req.modo, meta.planejavel
                ),
                tipo_calculo=meta.tipo_calculo,
                planejavel=meta.planejavel,
                estoque_combinado=resolucao.estoque_combinado,
                perfil=resolucao.perfil,
                frequencia=frequencia_saida(
                    snapshot.vendas.get(filial, ()), req.periodo_dias, data_fim
                ),
                cobertura_dias=cobertura_dias(est.estoque_atual, resolucao.perfil.media_ajustada),
                status_estoque=classificar_estoque(
                    est.estoque_atual, meta.meta, resolucao.perfil.media_ajustada, req.politica
                ),
            )
        )

    total_nec = sum(necessidades.values())
    total_aloc = sum(alocacoes.values())
    deficit = deficit_total(total_nec, disponivel)

    sugestoes = ()
    if deve_sugerir((f.status for f in filiais), deficit):
        estoques_origem = {
            m: e[req.filial_origem]
            for m, e in snapshot.estoques_grupo.items()
            if req.filial_origem in e
        }
        sugestoes = sugerir_combinados(
            req.codigo, snapshot.grupo, estoques_origem, snapshot.descricoes_grupo
        )

    return ResultadoAlocacao(
        codigo=req.codigo,
        descricao=snapshot.descricao,
        filial_origem=req.filial_origem,
        modo=req.modo,
        multiplo_venda=int(req.multiplo_venda),
        disponivel_origem=disponivel,
        necessidade_total=total_nec,
        deficit_total=deficit,
        nao_atendido=total_nec - total_aloc,
        sobra_origem=disponivel - total_aloc,
        status=status_requisicao(
            total_nec, disponivel, any(m.planejavel for m in metas.values())
        ),
        tipo_calculo=tipo_calculo_produto([f.tipo_calculo for f in filiais]),
        filiais=tuple(filiais),
        sugestoes_deficit=sugestoes,
    )
