from datetime import date
from pathlib import Path

import pytest

from drp.domain.models import ResultadoEstoqueMinimo
from drp.infra.db import connect
from drp.infra.migrations import apply_migrations
from drp.infra.repositories import (
    CombinadoRepo,
    EstoqueMinimoRepo,
    EstoqueRepo,
    FonteSQLite,
    ParamsRepo,
    ProdutoRepo,
    VendaRepo,
)
from drp.infra.views import create_views


@pytest.fixture
def db(tmp_path: Path) -> str:
    path = str(tmp_path / "drp_test.sqlite")
    apply_migrations(path)
    create_views(path)
    return path


def _minimo(calculado, codigo="P1", filial="00"):
    return ResultadoEstoqueMinimo(
        codigo=codigo,
        filial=filial,
        estoque_minimo_calculado=calculado,
        classe_abc="B",
        media_vendas_diarias=1.0,
        lead_time_dias=30.0,
        buffer_dias=3,
        fator_seguranca=1.5,
        fator_tendencia=1.0,
        vendas_180_dias=180.0,
        vendas_90_dias=90.0,
        vendas_90_180_dias=90.0,
    )


def test_migrations_idempotentes(db):
    apply_migrations(db)
    with connect(db) as c:
        assert c.execute("PRAGMA user_version;").fetchone()[0] == 2
        tabelas = {r[0] for r in c.execute("SELECT name FROM sqlite_master WHERE type='table'")}
    assert {"params", "produto", "venda", "estoque", "combinado", "estoque_minimo"} <= tabelas


def test_params_politica(db):
    repo = ParamsRepo(db)
    assert repo.politica().lead_time_dias == 30.0
    repo.set_many([("lead_time_dias", "45"), ("abater_combinados", "sim"), ("fator_pico", "abc")])
    p = repo.politica()
    assert p.lead_time_dias == 45.0
    assert p.dias_seguranca == 7.0
    assert p.fator_pico == 2.0   # valor inválido volta ao padrão
    assert p.abater_combinados is True
    assert repo.get("lead_time_dias") == "45"
    repo.set_many([("abater_combinados", "0")])
    assert repo.politica().abater_combinados is False


def test_params_abatimento_padrao(db):
    assert ParamsRepo(db).politica().abater_combinados is True


def test_produto_upsert_preserva_descricao(db):
    repo = ProdutoRepo(db)
    repo.upsert([{"codigo": "P1", "descricao": "Filtro", "multiplo_venda": 12}])
    repo.upsert([{"codigo": "P1", "multiplo_venda": 6, "ativo": 0}])
    p = repo.get("P1")
    assert p["descricao"] == "Filtro"
    assert repo.multiplo_venda("P1") == 6
    assert repo.multiplo_venda("XX") == 1
    assert repo.codigos_ativos() == []


def test_vendas_na_janela(db):
    VendaRepo(db).insert_many(
        [
            {"codigo": "P1", "filial": "00", "data": "2024-06-30", "quantidade": 3, "valor_unitario": 10},
            {"codigo": "P1", "filial": "00", "data": date(2024, 4, 2), "quantidade": 5},
            {"codigo": "P1", "filial": "00", "data": "2024-04-01", "quantidade": 7},
            {"codigo": "P1", "filial": "01", "data": "2024-06-30", "quantidade": 9},
        ]
    )
    fonte = FonteSQLite(db)
    obs = fonte.get_sales("P1", "00", 90, date(2024, 6, 30))
    assert [(o.data, o.quantidade) for o in obs] == [(date(2024, 4, 2), 5.0), (date(2024, 6, 30), 3.0)]
    assert obs[1].valor_unitario == 10.0


def test_faturamento_por_produto(db):
    VendaRepo(db).insert_many(
        [
            {"codigo": "P1", "filial": "00", "data": "2024-06-01", "quantidade": 2, "valor_unitario": 5},
            {"codigo": "P2", "filial": "00", "data": "2024-06-01", "quantidade": 3},
        ]
    )
    fat = VendaRepo(db).faturamento_por_produto("00", "2024-01-01", "2024-06-30")
    assert fat == {"P1": 10.0, "P2": 3.0}


def test_estoque_sem_cadastro_e_zero(db):
    est = FonteSQLite(db).get_stock("P1", "00")
    assert (est.estoque_atual, est.estoque_minimo) == (0.0, 0.0)


def test_minimo_dinamico_prevalece_sobre_cadastro(db):
    EstoqueRepo(db).upsert([{"codigo": "P1", "filial": "00", "estoque_atual": 4, "estoque_minimo": 10}])
    assert EstoqueRepo(db).get("P1", "00").estoque_minimo == 10.0
    EstoqueMinimoRepo(db).salvar_calculado(_minimo(25))
    est = EstoqueRepo(db).get("P1", "00")
    assert (est.estoque_atual, est.estoque_minimo) == (4.0, 25.0)
    with connect(db) as c:
        row = c.execute("SELECT estoque_minimo FROM vw_estoque_filial WHERE codigo='P1'").fetchone()
    assert row[0] == 25


def test_minimo_manual_prevalece_e_gera_historico(db):
    repo = EstoqueMinimoRepo(db)
    assert repo.salvar_calculado(_minimo(25)) == 25
    assert repo.definir_manual("P1", "00", 40) == 40
    # novo cálculo não sobrescreve o manual
    assert repo.salvar_calculado(_minimo(30)) == 40
    assert repo.get("P1", "00")["estoque_minimo_calculado"] == 30
    # removendo o manual volta ao calculado
    assert repo.definir_manual("P1", "00", None) == 30

    hist = repo.historico("P1", "00")
    assert [h["origem"] for h in hist] == ["calculo", "manual", "calculo", "manual"]
    assert hist[0]["estoque_minimo_anterior"] is None
    assert hist[1]["estoque_minimo_anterior"] == 25
    assert hist[1]["estoque_minimo_novo"] == 40
    # com o manual ativo o histórico registra o valor que vale, não o calculado
    assert (hist[2]["estoque_minimo_anterior"], hist[2]["estoque_minimo_novo"]) == (40, 40)
    assert hist[3]["estoque_minimo_novo"] == 30


def test_combinados(db):
    CombinadoRepo(db).upsert(
        [
            {"codigo": "P1", "codigo_grupo": "G1"},
            {"codigo": "P2", "codigo_grupo": "G1"},
            {"codigo": "P3", "codigo_grupo": "G1"},
            {"codigo": "P9", "codigo_grupo": "G2"},
        ]
    )
    fonte = FonteSQLite(db)
    assert fonte.get_substitute_group("P2") == ["P1", "P3"]
    assert fonte.get_substitute_group("P9") == []
    assert fonte.get_substitute_group("SEM") == []
    grupos = CombinadoRepo(db).grupos()
    assert [(g.codigo_grupo, g.produtos) for g in grupos] == [("G1", ("P1", "P2", "P3")), ("G2", ("P9",))]


def test_descricao(db):
    ProdutoRepo(db).upsert([{"codigo": "P1", "descricao": "Filtro"}])
    fonte = FonteSQLite(db)
    assert fonte.get_description("P1") == "Filtro"
    assert fonte.get_description("P2") is None


def test_minimo_calculado_zero_nao_apaga_cadastro(db):
    EstoqueRepo(db).upsert([{"codigo": "P1", "filial": "00", "estoque_atual": 4, "estoque_minimo": 10}])
    EstoqueMinimoRepo(db).salvar_calculado(_minimo(0))
    assert EstoqueRepo(db).get("P1", "00").estoque_minimo == 10.0
    with connect(db) as c:
        row = c.execute("SELECT estoque_minimo FROM vw_estoque_filial WHERE codigo='P1'").fetchone()
    assert row[0] == 10
    # zero manual é uma decisão explícita e prevalece
    EstoqueMinimoRepo(db).definir_manual("P1", "00", 0)
    assert EstoqueRepo(db).get("P1", "00").estoque_minimo == 0.0


def test_minimo_sem_linha_de_estoque(db):
    repo = EstoqueMinimoRepo(db)
    repo.salvar_calculado(_minimo(0, codigo="P7"))
    assert EstoqueRepo(db).get("P7", "00").estoque_minimo == 0.0
    repo.salvar_calculado(_minimo(12, codigo="P7"))
    assert EstoqueRepo(db).get("P7", "00").estoque_minimo == 12.0


def test_produtos_ativos(db):
    repo = ProdutoRepo(db)
    repo.upsert([{"codigo": "P2", "descricao": "Correia"}, {"codigo": "P1", "ativo": 0}, {"codigo": "P3"}])
    assert repo.codigos_ativos() == ["P2", "P3"]
    assert [p["codigo"] for p in repo.get_all()] == ["P1", "P2", "P3"]
