# drp/infra/logger.py
"""
Loggers do DRP.

Um arquivo por assunto em ``drp/logs``: cálculos de alocação, batch de
estoque mínimo, operações de banco e eventos do sistema. Nada é gravado
enquanto ``ENABLE_LOGGING`` e ``ENABLE_OUTPUT`` estiverem desligados.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional


# Flag global para habilitar/desabilitar logging
ENABLE_LOGGING = False
# Flag global para habilitar/desabilitar prints/output
ENABLE_OUTPUT = False


def print_system(*args, **kwargs):
    """Print controlado pelo ENABLE_OUTPUT."""
    if ENABLE_OUTPUT:
        print(*args, **kwargs)


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logger(name: str, log_file: str, level: int = logging.INFO) -> logging.Logger:
    """
    Configura um logger com saída apenas em arquivo.

    Args:
        name: Nome do logger
        log_file: Caminho do arquivo de log
        level: Nível de logging

    Returns:
        Logger configurado
    """
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False

    while logger.handlers:
        logger.removeHandler(logger.handlers[0])

    # delay=True: o arquivo só é criado na primeira mensagem
    file_handler = logging.FileHandler(log_file, encoding='utf-8', delay=True)
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    logger.addHandler(file_handler)

    return logger


BASE_DIR = Path(__file__).parent.parent
LOGS_DIR = BASE_DIR / "logs"

alocacao_logger = setup_logger('drp.alocacao', str(LOGS_DIR / 'alocacao.log'))
batch_logger = setup_logger('drp.batch', str(LOGS_DIR / 'batch.log'))
database_logger = setup_logger('drp.database', str(LOGS_DIR / 'database.log'))
system_logger = setup_logger('drp.system', str(LOGS_DIR / 'system.log'))


def _ativo() -> bool:
    return ENABLE_LOGGING or ENABLE_OUTPUT


def log_alocacao(codigo: str, filial_origem: str, resumo: Dict[str, Any], error: Optional[str] = None) -> None:
    """
    Registra o resultado (ou a falha) de um cálculo DRP.

    Args:
        codigo: Código do produto
        filial_origem: Filial/CD de onde sai a mercadoria
        resumo: Totais do cálculo (disponível, necessidade, déficit...)
        error: Mensagem de erro (opcional)
    """
    if not _ativo():
        return
    if error:
        alocacao_logger.error(f"DRP_FAILED: {codigo}@{filial_origem} - {error} - Data: {resumo}")
    else:
        alocacao_logger.info(f"DRP_OK: {codigo}@{filial_origem} - {resumo}")


def log_batch(job_id: str, event: str, level: str = "info", **kwargs) -> None:
    """Eventos do batch de estoque mínimo (início, falha por produto, fim)."""
    if not _ativo():
        return
    log_data = {"job_id": job_id, **kwargs}
    log_method = getattr(batch_logger, level.lower(), batch_logger.info)
    log_method(f"BATCH_{event.upper()}: {log_data}")


def log_database_operation(table: str, operation: str, affected_rows: int = 0, **kwargs) -> None:
    """
    Log específico para operações no banco de dados.

    Args:
        table: Nome da tabela
        operation: Operação SQL (INSERT, UPDATE, DELETE, SELECT)
        affected_rows: Número de linhas afetadas
        **kwargs: Dados adicionais
    """
    if not _ativo():
        return
    log_data = {
        "table": table,
        "operation": operation,
        "affected_rows": affected_rows,
        **kwargs
    }
    database_logger.info(f"DB_{operation}: {log_data}")


def log_system_event(event: str, details: Dict[str, Any] = None, level: str = "info") -> None:
    """
    Log para eventos do sistema.

    Args:
        event: Descrição do evento
        details: Detalhes adicionais (opcional)
        level: Nível do log (info, warning, error)
    """
    if not _ativo():
        return
    log_data = {"event": event, "details": details or {}}
    log_method = getattr(system_logger, level.lower(), system_logger.info)
    log_method(f"SYSTEM_EVENT: {event} - {log_data}")


def log_file_operation(operation: str, file_path: str, rows_processed: int = 0, **kwargs) -> None:
    """Log para importação de planilhas."""
    if not _ativo():
        return
    log_data = {
        "operation": operation,
        "file_path": file_path,
        "rows_processed": rows_processed,
        **kwargs
    }
    system_logger.info(f"FILE_{operation.upper()}: {log_data}")
