# drp/adapters/cli.py
"""
CLI do DRP (Typer).

Comandos principais:
- migrate                          -> aplica migrações e cria views
- params set/get/show              -> gerencia a política de reposição
- importar <tipo> <arquivo>        -> importa vendas | estoque | combinados | config
- produtos                         -> lista o cadastro de produtos
- combinados                       -> lista os grupos de combinados
- drp produto <codigo>             -> calcula a distribuição de um produto
- drp todos                        -> calcula todos os produtos ativos
- drp nf <arquivo>                 -> distribui os itens de uma NF de entrada
- minimo sugestao <codigo>         -> sugere estoque mínimo pela confiabilidade
- minimo batch                     -> recalcula o estoque mínimo dinâmico
- minimo manual <codigo> <filial>  -> define/remove o mínimo manual
- minimo historico <codigo> <filial> -> alterações do mínimo ativo
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import typer
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from drp.adapters.planilhas import load_itens_nf
from drp.config import CD_FILIAL, DB_PATH, DEFAULTS, FILIAIS_MAP
from drp.domain.erros import DadosInvalidosError
from drp.domain.models import GRANULARIDADE_DIARIA, MODO_PROPORCIONAL, ResultadoAlocacao
from drp.infra.migrations import apply_migrations
from drp.infra.repositories import (
    CombinadoRepo,
    EstoqueMinimoRepo,
    FonteSQLite,
    ParamsRepo,
    ProdutoRepo,
)
from drp.infra.views import create_views
from drp.usecases.calcular_drp import run_drp_nf, run_drp_produto, run_drp_produtos
from drp.usecases.estoque_minimo_batch import BatchEstoqueMinimo
from drp.usecases.importar_dados import TIPOS_IMPORTACAO, run_importar
from drp.usecases.sugestao_minimo import run_sugestao_minimo


app = typer.Typer(help="DRP - distribuição de estoque entre filiais")
console = Console()

_STATUS_ESTILO = {
    "ok": "bold green",
    "rateio": "bold yellow",
    "deficit": "bold red",
    "sem_historico": "bold magenta",
}


# -----------------------
# util
# -----------------------

def _print_json(obj) -> None:
    typer.echo(json.dumps(obj, ensure_ascii=False, indent=2, default=str))


def _fmt(val: Any) -> str:
    if val is None:
        return "-"
    if isinstance(val, bool):
        return "sim" if val else "não"
    if isinstance(val, float):
        return f"{val:,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")
    return str(val)


def _status(val: str) -> str:
    estilo = _STATUS_ESTILO.get(val)
    return f"[{estilo}]{val}[/]" if estilo else val


def _preparar(db_path: str) -> Tuple[FonteSQLite, ParamsRepo, ProdutoRepo]:
    apply_migrations(db_path)
    create_views(db_path)
    return FonteSQLite(db_path), ParamsRepo(db_path), ProdutoRepo(db_path)


def _data_ref(data: Optional[datetime]):
    return data.date() if data else None


def _display_table(data: List[Dict[str, Any]], title: str = "Resultado") -> None:
    """Exibe uma lista de dicionários em tabela Rich."""
    if not data:
        console.print(Panel("Nenhum dado encontrado", title=title, border_style="yellow"))
        return
    table = Table(title=title, box=box.ROUNDED)
    columns = list(data[0].keys())
    for column in columns:
        justify = "right" if isinstance(data[0][column], (int, float)) and not isinstance(data[0][column], bool) else "left"
        table.add_column(column, justify=justify)
    for row in data:
        table.add_row(*[_status(_fmt(row.get(c))) if c == "status" else _fmt(row.get(c)) for c in columns])
    console.print(table)


def _display_resultado(r: ResultadoAlocacao) -> None:
    titulo = f"DRP {r.codigo}" + (f" - {r.descricao}" if r.descricao else "")
    resumo = [
        f"Origem: {r.filial_origem}  |  Modo: {r.modo}  |  Múltiplo: {r.multiplo_venda}",
        f"Disponível: {r.disponivel_origem}  |  Necessidade: {r.necessidade_total}  |  "
        f"Alocado: {r.alocacao_total}",
        f"Déficit: {r.deficit_total}  |  Não atendido: {r.nao_atendido}  |  Sobra na origem: {r.sobra_origem}",
        f"Status: {_status(r.status)}  |  Base: {r.tipo_calculo}",
    ]
    if not r.produto_planejavel:
        resumo.append("[bold red]Produto sem histórico e sem estoque mínimo: não planejável[/]")
    console.print(Panel("\n".join(resumo), title=titulo, border_style="cyan"))

    table = Table(box=box.ROUNDED)
    for col, just in (
        ("Filial", "left"), ("Nome", "left"), ("Estoque", "right"), ("Mínimo", "right"),
        ("Média/dia", "right"), ("Conf.", "center"), ("Pico", "center"), ("Meta", "right"),
        ("Necess.", "right"), ("Alocar", "right"), ("Status", "center"), ("Base", "left"),
        ("Giro", "left"), ("Cobertura", "right"), ("Situação", "left"),
    ):
        table.add_column(col, justify=just)
    for f in r.filiais:
        p = f.perfil
        media = _fmt(p.media_ajustada) if p else "-"
        table.add_row(
            f.filial, f.nome, _fmt(f.estoque_atual), _fmt(f.estoque_minimo), media,
            p.confiabilidade if p else "-",
            "⚠" if p and p.tem_pico else "",
            str(f.meta), str(f.necessidade), str(f.alocacao_sugerida),
            _status(f.status), f.tipo_calculo,
            f.frequencia.classe if f.frequencia else "-",
            _fmt(f.cobertura_dias), f.status_estoque,
        )
    console.print(table)

    if r.sugestoes_deficit:
        sug = Table(title="Combinados com estoque na origem", box=box.ROUNDED)
        sug.add_column("Código")
        sug.add_column("Descrição")
        sug.add_column("Disponível", justify="right")
        for s in r.sugestoes_deficit:
            sug.add_row(s.codigo, s.descricao or "", _fmt(s.estoque_disponivel))
        console.print(sug)


def _falha(e: Exception) -> None:
    typer.echo(f"Erro: {e}", err=True)
    raise typer.Exit(code=1)


# -----------------------
# comandos de infra
# -----------------------

@app.command("migrate")
def cmd_migrate(db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite")):
    """Aplica migrações e recria as views auxiliares."""
    apply_migrations(db_path)
    create_views(db_path)
    typer.echo(f">> Migrações aplicadas e views criadas em: {db_path}")


params_app = typer.Typer(help="Gerenciar a política de reposição (lead time, segurança, picos).")
app.add_typer(params_app, name="params")


@params_app.command("set")
def cmd_params_set(
    lead_time_dias: Optional[float] = typer.Option(None, help="Dias até a reposição chegar (ex.: 30)"),
    dias_seguranca: Optional[float] = typer.Option(None, help="Buffer de segurança em dias (ex.: 7)"),
    fator_pico: Optional[float] = typer.Option(None, help="Multiplicador da mediana para marcar pico (ex.: 2)"),
    abater_combinados: Optional[bool] = typer.Option(
        None, "--abater-combinados/--nao-abater-combinados",
        help="Com estoque do grupo na filial, repor só até o mínimo",
    ),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    """Define parâmetros (apenas os informados são alterados)."""
    items: List[Tuple[str, str]] = []
    if lead_time_dias is not None:
        items.append(("lead_time_dias", str(lead_time_dias)))
    if dias_seguranca is not None:
        items.append(("dias_seguranca", str(dias_seguranca)))
    if fator_pico is not None:
        items.append(("fator_pico", str(fator_pico)))
    if abater_combinados is not None:
        items.append(("abater_combinados", "1" if abater_combinados else "0"))
    if not items:
        typer.echo("Nada a alterar. Informe pelo menos um parâmetro.")
        raise typer.Exit(code=1)
    apply_migrations(db_path)
    ParamsRepo(db_path).set_many(items)
    typer.echo(">> Parâmetros atualizados.")


@params_app.command("get")
def cmd_params_get(
    chave: str = typer.Argument(..., help="Ex.: lead_time_dias | dias_seguranca | fator_pico"),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    """Mostra um parâmetro específico."""
    apply_migrations(db_path)
    val = ParamsRepo(db_path).get(chave)
    typer.echo("(None)" if val is None else val)


@params_app.command("show")
def cmd_params_show(
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
    as_json: bool = typer.Option(False, "--json", help="Saída em JSON"),
):
    """Exibe a política efetiva (com fallback para defaults)."""
    apply_migrations(db_path)
    politica = ParamsRepo(db_path).politica()
    linhas = [
        {"parametro": "lead_time_dias", "valor": politica.lead_time_dias, "padrao": DEFAULTS.lead_time_dias},
        {"parametro": "dias_seguranca", "valor": politica.dias_seguranca, "padrao": DEFAULTS.dias_seguranca},
        {"parametro": "fator_pico", "valor": politica.fator_pico, "padrao": DEFAULTS.fator_pico},
        {"parametro": "abater_combinados", "valor": politica.abater_combinados, "padrao": True},
    ]
    if as_json:
        _print_json({l["parametro"]: l["valor"] for l in linhas})
        return
    _display_table(linhas, title="Parâmetros do DRP")
    console.print(f"[dim]Banco de dados: {db_path}[/dim]")


# -----------------------
# importação
# -----------------------

@app.command("importar")
def cmd_importar(
    tipo: str = typer.Argument(..., help="vendas | estoque | combinados | config"),
    path: str = typer.Argument(..., help="Caminho do XLSX/CSV"),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    """Importa uma planilha exportada do ERP."""
    if tipo not in TIPOS_IMPORTACAO:
        typer.echo(f"Tipo inválido: {tipo}. Use: {', '.join(TIPOS_IMPORTACAO)}", err=True)
        raise typer.Exit(code=1)
    info = run_importar(tipo, path, db_path=db_path)
    typer.echo(f">> {info['linhas_importadas']} linha(s) de {tipo} importada(s) de {path}")


@app.command("produtos")
def cmd_produtos(
    as_json: bool = typer.Option(False, "--json", help="Saída em JSON"),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    """Lista o cadastro de produtos (múltiplo de venda e ativo)."""
    apply_migrations(db_path)
    linhas = ProdutoRepo(db_path).get_all()
    for p in linhas:
        p["ativo"] = bool(p["ativo"])
    if as_json:
        _print_json(linhas)
        return
    _display_table(linhas, title="Produtos")


@app.command("combinados")
def cmd_combinados(
    as_json: bool = typer.Option(False, "--json", help="Saída em JSON"),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    """Lista os grupos de produtos combinados (intercambiáveis)."""
    apply_migrations(db_path)
    grupos = CombinadoRepo(db_path).grupos()
    if as_json:
        _print_json({g.codigo_grupo: list(g.produtos) for g in grupos})
        return
    _display_table(
        [{"grupo": g.codigo_grupo, "produtos": ", ".join(g.produtos)} for g in grupos],
        title="Combinados",
    )


# -----------------------
# DRP
# -----------------------

drp_app = typer.Typer(help="Cálculo de distribuição (DRP).")
app.add_typer(drp_app, name="drp")


@drp_app.command("produto")
def cmd_drp_produto(
    codigo: str = typer.Argument(..., help="Código do produto"),
    origem: str = typer.Option(CD_FILIAL, "--origem", help="Filial/CD de origem"),
    destino: Optional[List[str]] = typer.Option(None, "--destino", help="Filial destino (repetível)"),
    periodo: int = typer.Option(DEFAULTS.periodo_dias, "--periodo", help="Janela de vendas: 30, 60, 90, 120 ou 180"),
    modo: str = typer.Option(MODO_PROPORCIONAL, "--modo", help="proporcional | prioridade"),
    quantidade: Optional[float] = typer.Option(None, "--quantidade", help="Quantidade a distribuir (padrão: estoque da origem)"),
    granularidade: str = typer.Option(GRANULARIDADE_DIARIA, "--granularidade", help="diaria | mensal"),
    data: Optional[datetime] = typer.Option(None, "--data", formats=["%Y-%m-%d"], help="Fim da janela (padrão: hoje)"),
    as_json: bool = typer.Option(False, "--json", help="Saída em JSON"),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    """Calcula quanto enviar a cada filial de um produto."""
    fonte, params, produtos = _preparar(db_path)
    try:
        r = run_drp_produto(
            fonte,
            codigo,
            filial_origem=origem,
            filiais_destino=destino or None,
            periodo_dias=periodo,
            politica=params.politica(),
            multiplo_venda=produtos.multiplo_venda(codigo),
            modo=modo,
            data_referencia=_data_ref(data),
            quantidade_origem=quantidade,
            granularidade=granularidade,
        )
    except DadosInvalidosError as e:
        _falha(e)
    if as_json:
        _print_json(r.to_dict())
        return
    _display_resultado(r)


@drp_app.command("todos")
def cmd_drp_todos(
    origem: str = typer.Option(CD_FILIAL, "--origem", help="Filial/CD de origem"),
    periodo: int = typer.Option(DEFAULTS.periodo_dias, "--periodo", help="Janela de vendas"),
    modo: str = typer.Option(MODO_PROPORCIONAL, "--modo", help="proporcional | prioridade"),
    data: Optional[datetime] = typer.Option(None, "--data", formats=["%Y-%m-%d"], help="Fim da janela (padrão: hoje)"),
    as_json: bool = typer.Option(False, "--json", help="Saída em JSON"),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    """Calcula a distribuição de todos os produtos ativos do cadastro."""
    fonte, params, produtos = _preparar(db_path)
    codigos = produtos.codigos_ativos()
    out = run_drp_produtos(
        fonte,
        codigos,
        multiplos={c: produtos.multiplo_venda(c) for c in codigos},
        filial_origem=origem,
        periodo_dias=periodo,
        politica=params.politica(),
        modo=modo,
        data_referencia=_data_ref(data),
    )
    if as_json:
        _print_json({
            "resultados": [r.to_dict() for r in out["resultados"]],
            "erros": out["erros"],
        })
        return
    linhas = [
        {
            "codigo": r.codigo,
            "descricao": r.descricao,
            "disponivel": r.disponivel_origem,
            "necessidade": r.necessidade_total,
            "alocado": r.alocacao_total,
            "status": r.status,
        }
        for r in out["resultados"]
    ]
    _display_table(linhas, title="DRP - produtos ativos")
    if out["erros"]:
        _display_table(out["erros"], title="Produtos com erro")


@drp_app.command("nf")
def cmd_drp_nf(
    path: str = typer.Argument(..., help="XLSX/CSV com os itens da NF (codigo, quantidade)"),
    origem: str = typer.Option(CD_FILIAL, "--origem", help="Filial/CD que recebeu a NF"),
    periodo: int = typer.Option(DEFAULTS.periodo_dias, "--periodo", help="Janela de vendas"),
    data: Optional[datetime] = typer.Option(None, "--data", formats=["%Y-%m-%d"], help="Fim da janela (padrão: hoje)"),
    as_json: bool = typer.Option(False, "--json", help="Saída em JSON"),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    """Distribui os itens de uma NF de entrada por prioridade de filial."""
    fonte, params, produtos = _preparar(db_path)
    itens = load_itens_nf(path)
    for item in itens:
        item["multiplo_venda"] = produtos.multiplo_venda(item["codigo"])
    out = run_drp_nf(
        fonte,
        itens,
        filial_origem=origem,
        periodo_dias=periodo,
        politica=params.politica(),
        data_referencia=_data_ref(data),
    )
    if as_json:
        _print_json({
            "resultados": [r.to_dict() for r in out["resultados"]],
            "erros": out["erros"],
        })
        return
    for r in out["resultados"]:
        _display_resultado(r)
    if out["erros"]:
        _display_table(out["erros"], title="Itens com erro")


# -----------------------
# estoque mínimo
# -----------------------

minimo_app = typer.Typer(help="Estoque mínimo (sugestão, recálculo em lote, valor manual).")
app.add_typer(minimo_app, name="minimo")


@minimo_app.command("sugestao")
def cmd_minimo_sugestao(
    codigo: str = typer.Argument(..., help="Código do produto"),
    periodo: int = typer.Option(DEFAULTS.periodo_dias, "--periodo", help="Janela de vendas"),
    data: Optional[datetime] = typer.Option(None, "--data", formats=["%Y-%m-%d"], help="Fim da janela (padrão: hoje)"),
    as_json: bool = typer.Option(False, "--json", help="Saída em JSON"),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    """Sugere o estoque mínimo por filial (7/14/21 dias conforme a confiabilidade)."""
    fonte, _, _ = _preparar(db_path)
    try:
        linhas = run_sugestao_minimo(fonte, codigo, periodo_dias=periodo, data_referencia=_data_ref(data))
    except DadosInvalidosError as e:
        _falha(e)
    if as_json:
        _print_json(linhas)
        return
    _display_table(linhas, title=f"Sugestão de estoque mínimo - {codigo}")


@minimo_app.command("batch")
def cmd_minimo_batch(
    data: Optional[datetime] = typer.Option(None, "--data", formats=["%Y-%m-%d"], help="Data de referência (padrão: hoje)"),
    as_json: bool = typer.Option(False, "--json", help="Saída em JSON"),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    """Recalcula o estoque mínimo dinâmico de todos os produtos/filiais."""
    _preparar(db_path)
    job = BatchEstoqueMinimo(db_path, data_referencia=_data_ref(data)).executar()
    if as_json:
        _print_json(job.to_dict())
    else:
        console.print(Panel(
            f"Status: {job.status}\nTotal: {job.total}  |  Sucesso: {job.sucesso}  |  Erros: {job.erros}\n{job.mensagem}",
            title=f"Estoque mínimo - job {job.id}",
        ))
    if job.status == "error":
        raise typer.Exit(code=1)


@minimo_app.command("manual")
def cmd_minimo_manual(
    codigo: str = typer.Argument(..., help="Código do produto"),
    filial: str = typer.Argument(..., help="Código da filial"),
    valor: Optional[int] = typer.Argument(None, help="Mínimo manual (omitir para remover)"),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    """Define o estoque mínimo manual (prevalece sobre o calculado)."""
    if filial not in FILIAIS_MAP:
        typer.echo(f"Filial desconhecida: {filial}", err=True)
        raise typer.Exit(code=1)
    if valor is not None and valor < 0:
        typer.echo("O mínimo manual não pode ser negativo.", err=True)
        raise typer.Exit(code=1)
    apply_migrations(db_path)
    ativo = EstoqueMinimoRepo(db_path).definir_manual(codigo, filial, valor)
    typer.echo(f">> Estoque mínimo ativo de {codigo}@{filial}: {ativo}")


@minimo_app.command("historico")
def cmd_minimo_historico(
    codigo: str = typer.Argument(..., help="Código do produto"),
    filial: str = typer.Argument(..., help="Código da filial"),
    as_json: bool = typer.Option(False, "--json", help="Saída em JSON"),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    """Mostra as alterações do estoque mínimo ativo (cálculo e manual)."""
    apply_migrations(db_path)
    linhas = EstoqueMinimoRepo(db_path).historico(codigo, filial)
    if as_json:
        _print_json(linhas)
        return
    _display_table(linhas, title=f"Histórico do mínimo - {codigo}@{filial}")


# Entry point opcional:
def main():
    app()


if __name__ == "__main__":
    main()
