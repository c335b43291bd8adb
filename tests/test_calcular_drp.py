from pathlib import Path

import pytest

from drp.domain.erros import DadosInvalidosError
from drp.domain.models import PoliticaReposicao
from drp.infra.migrations import apply_migrations
from drp.infra.repositories import EstoqueRepo, FonteSQLite, ProdutoRepo, VendaRepo
from drp.usecases.calcular_drp import run_drp_nf, run_drp_produto, run_drp_produtos
from drp.usecases.sugestao_minimo import run_sugestao_minimo


def test_destinos_padrao_excluem_origem_e_garantia(fonte, data_fim):
    fonte.estoque("P1", "04", atual=10)
    r = run_drp_produto(fonte, "P1", data_referencia=data_fim)
    assert [f.filial for f in r.filiais] == ["00", "01", "02", "05", "06"]
    assert r.filial_origem == "04"


def test_origem_alternativa(fonte, data_fim):
    fonte.estoque("P1", "01", minimo=5).estoque("P1", "00", atual=8)
    r = run_drp_produto(fonte, "P1", filial_origem="00", filiais_destino=["01"], data_referencia=data_fim)
    assert r.filiais[0].alocacao_sugerida == 5
    assert r.sobra_origem == 3


def test_erro_de_validacao_propaga(fonte, data_fim):
    with pytest.raises(DadosInvalidosError):
        run_drp_produto(fonte, "P1", filiais_destino=["00"], periodo_dias=7, data_referencia=data_fim)


def test_lote_isola_falhas(fonte, data_fim):
    fonte.estoque("P1", "00", minimo=12).estoque("P1", "04", atual=100)
    fonte.estoque("P2", "00", minimo=5).estoque("P2", "04", atual=100)
    fonte.falhar_em.add("P2")
    out = run_drp_produtos(
        fonte,
        ["P1", "P2"],
        multiplos={"P1": 5},
        filiais_destino=["00"],
        data_referencia=data_fim,
    )
    assert [r.codigo for r in out["resultados"]] == ["P1"]
    assert out["resultados"][0].filiais[0].alocacao_sugerida == 10
    assert out["erros"] == [{"codigo": "P2", "erro": "falha simulada em P2"}]


def test_nf_distribui_por_prioridade(fonte, data_fim):
    for filial in ("00", "01"):
        fonte.estoque("P1", filial, minimo=10)
    out = run_drp_nf(
        fonte,
        [{"codigo": "P1", "quantidade": 14}, {"codigo": "P2", "quantidade": 1.5}],
        filiais_destino=["01", "00"],
        data_referencia=data_fim,
    )
    r = out["resultados"][0]
    assert r.modo == "prioridade"
    assert r.disponivel_origem == 14
    assert {f.filial: f.alocacao_sugerida for f in r.filiais} == {"01": 4, "00": 10}
    assert [e["codigo"] for e in out["erros"]] == ["P2"]


def test_politica_personalizada(fonte, data_fim):
    fonte.venda_diaria("P1", "00", 1).estoque("P1", "04", atual=100)
    r = run_drp_produto(
        fonte,
        "P1",
        filiais_destino=["00"],
        politica=PoliticaReposicao(lead_time_dias=10, dias_seguranca=0),
        data_referencia=data_fim,
    )
    assert r.filiais[0].meta == 10


def test_sugestao_minimo(fonte, data_fim):
    fonte.venda_diaria("P1", "00", 2).estoque("P1", "00", minimo=3)
    out = run_sugestao_minimo(fonte, "P1", filiais=["00", "01"], data_referencia=data_fim)
    assert out[0]["confiabilidade"] == "alta"
    assert out[0]["estoque_minimo_sugerido"] == 14
    assert out[0]["estoque_minimo_atual"] == 3
    assert out[1]["confiabilidade"] == "baixa"
    assert out[1]["estoque_minimo_sugerido"] == 0


def test_fluxo_completo_sobre_sqlite(tmp_path: Path, data_fim):
    db = str(tmp_path / "drp.sqlite")
    apply_migrations(db)
    ProdutoRepo(db).upsert([{"codigo": "P1", "descricao": "Filtro de óleo"}])
    VendaRepo(db).insert_many(
        {"codigo": "P1", "filial": "00", "data": f"2024-06-{d:02d}", "quantidade": 2}
        for d in range(1, 31)
    )
    EstoqueRepo(db).upsert(
        [
            {"codigo": "P1", "filial": "00", "estoque_atual": 10},
            {"codigo": "P1", "filial": "04", "estoque_atual": 500},
        ]
    )
    r = run_drp_produto(FonteSQLite(db), "P1", filiais_destino=["00"], periodo_dias=30, data_referencia=data_fim)
    f = r.filiais[0]
    assert r.descricao == "Filtro de óleo"
    assert f.perfil.media_diaria == pytest.approx(2.0)
    assert (f.meta, f.necessidade, f.alocacao_sugerida) == (74, 64, 64)
