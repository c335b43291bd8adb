# drp/domain/models.py
"""
Modelos (dataclasses) do domínio DRP.

Observação importante:
- Todos os registros são imutáveis (``frozen=True``). O motor recebe um
  snapshot já carregado dos colaboradores e devolve um resultado novo a cada
  chamada; nada aqui é fonte de verdade persistida.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any, Dict, Mapping, Optional, Tuple

from drp.config import DEFAULTS


# Valores de tipo_calculo
TIPO_VENDAS = "vendas"
TIPO_ESTOQUE_MINIMO = "estoque_minimo"
TIPO_COMBINADO = "combinado"
TIPO_SEM_HISTORICO = "sem_historico"

# Valores de status
STATUS_OK = "ok"
STATUS_RATEIO = "rateio"
STATUS_DEFICIT = "deficit"
STATUS_SEM_HISTORICO = "sem_historico"   # filial sem venda e sem mínimo: não planejável

# Situação do estoque atual frente à meta (cobertura em dias)
ESTOQUE_RUPTURA_CRITICO = "RUPTURA_CRITICO"
ESTOQUE_RUPTURA_ALERTA = "RUPTURA_ALERTA"
ESTOQUE_NORMAL = "NORMAL"
ESTOQUE_EXCESSO_ALERTA = "EXCESSO_ALERTA"
ESTOQUE_EXCESSO_CRITICO = "EXCESSO_CRITICO"

# Modos de rateio
MODO_PROPORCIONAL = "proporcional"
MODO_PRIORIDADE = "prioridade"

# Granularidade dos buckets do perfil
GRANULARIDADE_DIARIA = "diaria"
GRANULARIDADE_MENSAL = "mensal"


@dataclass(frozen=True)
class ObservacaoVenda:
    """Venda de um produto em uma filial (fato histórico do razão)."""
    filial: str
    data: date
    quantidade: float
    valor_unitario: Optional[float] = None   # usado só na curva ABC


@dataclass(frozen=True)
class EstadoEstoque:
    """Posição de estoque de um produto em uma filial."""
    codigo: str
    filial: str
    estoque_atual: float = 0.0
    estoque_minimo: float = 0.0


@dataclass(frozen=True)
class GrupoCombinado:
    """Conjunto de produtos intercambiáveis."""
    codigo_grupo: str
    produtos: Tuple[str, ...] = ()


@dataclass(frozen=True)
class PoliticaReposicao:
    """Parâmetros de política fornecidos pelo colaborador de configuração."""
    lead_time_dias: float = DEFAULTS.lead_time_dias
    dias_seguranca: float = DEFAULTS.dias_seguranca
    fator_pico: float = DEFAULTS.fator_pico
    abater_combinados: bool = True   # estoque do grupo na filial: repõe só o mínimo

    @property
    def dias_cobertura(self) -> float:
        return float(self.lead_time_dias) + float(self.dias_seguranca)


@dataclass(frozen=True)
class PerfilDemanda:
    """Estatísticas de demanda de (produto, filial, janela)."""
    codigo: str
    filial: str
    periodo_dias: int
    granularidade: str
    buckets: Tuple[float, ...]
    total_vendas: float
    media_diaria: float
    desvio_padrao: float
    coeficiente_variacao: Optional[float]   # None quando media_diaria == 0
    confiabilidade: str                     # 'alta' | 'media' | 'baixa'
    tem_pico: bool = False
    media_ajustada: float = 0.0             # média usada no cálculo da meta
    picos: Tuple[int, ...] = ()             # índices dos buckets marcados

    @property
    def sem_historico(self) -> bool:
        return self.total_vendas <= 0


@dataclass(frozen=True)
class FrequenciaSaida:
    """Dias com venda na janela, em percentual do período."""
    classe: str                 # 'alta' | 'media' | 'baixa' | 'sem_saida'
    dias_com_saida: int
    periodo_dias: int
    percentual_dias: float


@dataclass(frozen=True)
class ResolucaoDemanda:
    """Saída do resolvedor de combinados."""
    perfil: PerfilDemanda
    tipo_calculo: str
    estoque_combinado: float = 0.0
    membros: Tuple[str, ...] = ()


@dataclass(frozen=True)
class MetaFilial:
    meta: int
    tipo_calculo: str
    planejavel: bool
    meta_vendas: float = 0.0


@dataclass(frozen=True)
class RequisicaoAlocacao:
    """Pedido de cálculo DRP para um produto."""
    codigo: str
    filial_origem: str
    filiais_destino: Tuple[str, ...]
    periodo_dias: int = DEFAULTS.periodo_dias
    politica: PoliticaReposicao = field(default_factory=PoliticaReposicao)
    multiplo_venda: int = DEFAULTS.multiplo_venda
    modo: str = MODO_PROPORCIONAL
    quantidade_origem: Optional[float] = None   # fluxo NF: quantidade recebida
    data_referencia: Optional[date] = None
    prioridade: Tuple[str, ...] = DEFAULTS.prioridade_filiais
    granularidade: str = GRANULARIDADE_DIARIA


@dataclass(frozen=True)
class SnapshotProduto:
    """Dados de um produto já lidos dos colaboradores, prontos para o motor."""
    codigo: str
    descricao: Optional[str]
    disponivel_origem: float
    estoques: Mapping[str, EstadoEstoque]
    vendas: Mapping[str, Tuple[ObservacaoVenda, ...]]
    grupo: Tuple[str, ...] = ()
    vendas_grupo: Mapping[str, Mapping[str, Tuple[ObservacaoVenda, ...]]] = field(default_factory=dict)
    estoques_grupo: Mapping[str, Mapping[str, EstadoEstoque]] = field(default_factory=dict)
    descricoes_grupo: Mapping[str, Optional[str]] = field(default_factory=dict)


@dataclass(frozen=True)
class SugestaoCombinado:
    codigo: str
    descricao: Optional[str]
    estoque_disponivel: float


@dataclass(frozen=True)
class ResultadoFilial:
    filial: str
    nome: str
    estoque_atual: float
    estoque_minimo: float
    meta: int
    necessidade: int
    alocacao_sugerida: int
    status: str
    tipo_calculo: str
    planejavel: bool = True
    estoque_combinado: float = 0.0
    perfil: Optional[PerfilDemanda] = None
    frequencia: Optional[FrequenciaSaida] = None
    cobertura_dias: Optional[float] = None
    status_estoque: str = ESTOQUE_NORMAL


@dataclass(frozen=True)
class ResultadoAlocacao:
    codigo: str
    descricao: Optional[str]
    filial_origem: str
    modo: str
    multiplo_venda: int
    disponivel_origem: int
    necessidade_total: int
    deficit_total: int
    nao_atendido: int
    sobra_origem: int
    status: str
    tipo_calculo: str
    filiais: Tuple[ResultadoFilial, ...]
    sugestoes_deficit: Tuple[SugestaoCombinado, ...] = ()

    @property
    def alocacao_total(self) -> int:
        return sum(f.alocacao_sugerida for f in self.filiais)

    @property
    def produto_planejavel(self) -> bool:
        return any(f.planejavel for f in self.filiais)

    def to_dict(self) -> Dict[str, Any]:
        """Formato consumido pela camada de relatórios/pedidos."""
        filiais = []
        for f in self.filiais:
            d = asdict(f)
            perfil = d.pop("perfil")
            if perfil is not None:
                d["media_diaria"] = perfil["media_diaria"]
                d["media_ajustada"] = perfil["media_ajustada"]
                d["desvio_padrao"] = perfil["desvio_padrao"]
                d["coeficiente_variacao"] = perfil["coeficiente_variacao"]
                d["confiabilidade"] = perfil["confiabilidade"]
                d["tem_pico"] = perfil["tem_pico"]
            frequencia = d.pop("frequencia")
            if frequencia is not None:
                d["frequencia_saida"] = frequencia["classe"]
                d["percentual_dias_saida"] = frequencia["percentual_dias"]
            filiais.append(d)
        return {
            "codigo": self.codigo,
            "descricao": self.descricao,
            "filial_origem": self.filial_origem,
            "modo": self.modo,
            "multiplo_venda": self.multiplo_venda,
            "disponivel_origem": self.disponivel_origem,
            "necessidade_total": self.necessidade_total,
            "alocacao_total": self.alocacao_total,
            "deficit_total": self.deficit_total,
            "nao_atendido": self.nao_atendido,
            "sobra_origem": self.sobra_origem,
            "status": self.status,
            "tipo_calculo": self.tipo_calculo,
            "planejavel": self.produto_planejavel,
            "filiais": filiais,
            "sugestoes_deficit": [asdict(s) for s in self.sugestoes_deficit],
        }


@dataclass(frozen=True)
class ResultadoEstoqueMinimo:
    """Estoque mínimo dinâmico calculado para (produto, filial)."""
    codigo: str
    filial: str
    estoque_minimo_calculado: int
    classe_abc: str
    media_vendas_diarias: float
    lead_time_dias: float
    buffer_dias: int
    fator_seguranca: float
    fator_tendencia: float
    vendas_180_dias: float
    vendas_90_dias: float
    vendas_90_180_dias: float
    estoque_minimo_anterior: Optional[int] = None
    variacao_percentual: Optional[float] = None
