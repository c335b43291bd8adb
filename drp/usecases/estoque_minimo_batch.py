# drp/usecases/estoque_minimo_batch.py
"""
Caso de uso: recalcular o estoque mínimo dinâmico de todo o catálogo.

Fluxo:
1) Lê o catálogo (pares produto/filial da tabela ``estoque``).
2) Pré-calcula a curva ABC de cada filial (faturamento dos últimos 180 dias).
3) Para cada par calcula o mínimo (``drp.domain.estoque_minimo``) e grava
   em ``estoque_minimo`` (um mínimo manual continua prevalecendo).

Um produto com erro é registrado em ``batch.log`` e o processamento segue.
O job só termina com status ``error`` se o catálogo não puder ser lido.
Apenas uma execução por vez.
"""

from __future__ import annotations

import threading
import uuid
from dataclasses import asdict, dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence

from drp.config import DB_PATH, DEFAULTS, FILIAIS_MAP
from drp.domain.estoque_minimo import calcular_estoque_minimo, classificar_abc
from drp.infra.logger import log_batch, log_system_event, print_system
from drp.infra.repositories import EstoqueMinimoRepo, EstoqueRepo, ParamsRepo, VendaRepo

MAX_PRODUTOS_ERRO = 50

STATUS_IDLE = "idle"
STATUS_RUNNING = "running"
STATUS_COMPLETED = "completed"
STATUS_ERROR = "error"


@dataclass
class JobEstoqueMinimo:
    id: str
    status: str = STATUS_IDLE
    total: int = 0
    processados: int = 0
    sucesso: int = 0
    erros: int = 0
    produtos_erro: List[str] = field(default_factory=list)
    inicio: Optional[str] = None
    fim: Optional[str] = None
    mensagem: str = ""

    @property
    def progresso(self) -> float:
        return (self.processados / self.total * 100.0) if self.total else 0.0

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["progresso"] = round(self.progresso, 1)
        return d


class BatchEstoqueMinimo:
    """Executor do recálculo; guarda o estado do último job."""

    def __init__(
        self,
        db_path: str = DB_PATH,
        filiais: Optional[Sequence[str]] = None,
        data_referencia: Optional[date] = None,
    ):
        self.db_path = db_path
        self.filiais = tuple(filiais) if filiais else tuple(FILIAIS_MAP)
        self.data_referencia = data_referencia
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self.job: Optional[JobEstoqueMinimo] = None

    # ------------- estado -------------

    def em_execucao(self) -> bool:
        return self.job is not None and self.job.status == STATUS_RUNNING

    def status(self) -> Dict[str, Any]:
        if self.job is None:
            return {"status": STATUS_IDLE}
        return self.job.to_dict()

    # ------------- execução -------------

    def _novo_job(self) -> JobEstoqueMinimo:
        with self._lock:
            if self.em_execucao():
                raise RuntimeError(f"job {self.job.id} já está em execução")
            self.job = JobEstoqueMinimo(
                id=uuid.uuid4().hex[:12],
                status=STATUS_RUNNING,
                inicio=datetime.now().isoformat(timespec="seconds"),
                mensagem="Carregando catálogo...",
            )
            return self.job

    def executar(self) -> JobEstoqueMinimo:
        """Roda o recálculo no thread atual e devolve o job concluído."""
        job = self._novo_job()
        self._processar(job)
        return job

    def iniciar(self) -> JobEstoqueMinimo:
        """Dispara o recálculo em background e retorna o job imediatamente."""
        job = self._novo_job()
        self._thread = threading.Thread(target=self._processar, args=(job,), daemon=True)
        self._thread.start()
        return job

    def aguardar(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def _processar(self, job: JobEstoqueMinimo) -> None:
        log_batch(job.id, "start", filiais=list(self.filiais))
        data_fim = self.data_referencia or date.today()
        inicio = (data_fim - timedelta(days=DEFAULTS.janela_minimo_dias - 1)).isoformat()
        fim = data_fim.isoformat()

        vendas_repo = VendaRepo(self.db_path)
        minimo_repo = EstoqueMinimoRepo(self.db_path)
        try:
            lead_time = ParamsRepo(self.db_path).get_float("lead_time_dias", DEFAULTS.lead_time_dias)
            pares = [
                (c, f) for c, f in EstoqueRepo(self.db_path).pares_produto_filial()
                if f in self.filiais
            ]
            job.mensagem = "Pré-calculando classificação ABC..."
            abc = {
                f: classificar_abc(vendas_repo.faturamento_por_produto(f, inicio, fim))
                for f in self.filiais
            }
        except Exception as e:
            job.status = STATUS_ERROR
            job.mensagem = f"Falha ao carregar catálogo: {e}"
            job.fim = datetime.now().isoformat(timespec="seconds")
            log_batch(job.id, "error", level="error", error=str(e))
            log_system_event("estoque_minimo_batch_error", {"job_id": job.id, "error": str(e)}, level="error")
            return

        job.total = len(pares)
        job.mensagem = f"Processando {job.total} produtos/filiais..."
        for codigo, filial in pares:
            try:
                vendas = vendas_repo.vendas(codigo, filial, inicio, fim)
                resultado = calcular_estoque_minimo(
                    codigo,
                    filial,
                    vendas,
                    data_fim,
                    classe_abc=abc.get(filial, {}).get(codigo, "C"),
                    lead_time_dias=lead_time,
                    minimo_anterior=minimo_repo.ativo(codigo, filial),
                )
                minimo_repo.salvar_calculado(resultado)
                job.sucesso += 1
            except Exception as e:
                job.erros += 1
                if len(job.produtos_erro) < MAX_PRODUTOS_ERRO:
                    job.produtos_erro.append(f"{codigo}@{filial}")
                log_batch(job.id, "item_error", level="warning", codigo=codigo, filial=filial, error=str(e))
            finally:
                job.processados += 1

        job.status = STATUS_COMPLETED
        job.fim = datetime.now().isoformat(timespec="seconds")
        job.mensagem = f"Concluído: {job.sucesso} ok, {job.erros} com erro"
        print_system(f">> {job.mensagem}")
        log_batch(job.id, "done", total=job.total, sucesso=job.sucesso, erros=job.erros)
