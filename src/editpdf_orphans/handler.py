"""Handler: disparado por EventBridge (agendado) ou invocação manual."""

from aws_lambda_powertools import Logger
from aws_lambda_powertools.utilities.typing import LambdaContext
from pydantic import ValidationError

from editpdf_orphans import SERVICE_NAME
from editpdf_orphans.schemas import CleanupOptions
from editpdf_orphans.service import FixOrphanedFilesService

logger = Logger(service=SERVICE_NAME)


def _log_line(text: str, end: str = "\n") -> None:
    if text.strip():
        logger.info(text.strip())


@logger.inject_lambda_context
def lambda_handler(event: dict, context: LambdaContext):
    """
    Executa a limpeza de arquivos órfãos de assignfeedback_editpdf.

    Payload (em event["detail"] para eventos agendados, ou no próprio event):
        {"fix": bool, "page_size": int}
    Sem "fix" roda em modo de relatório.
    """
    event = event or {}
    payload = event.get("detail") or event
    try:
        options = CleanupOptions(**payload)
    except ValidationError as e:
        logger.warning(f"Erro de validação: {str(e)}")
        return {"statusCode": 400, "body": {"error": "Dados inválidos", "details": str(e)}}

    try:
        summary = FixOrphanedFilesService(options, echo=_log_line).run()
    except Exception:
        logger.exception("Erro na limpeza de arquivos órfãos")
        raise
    return {"statusCode": 200, "body": summary.model_dump()}
