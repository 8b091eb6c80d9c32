"""Service: varredura, remoção e relatório dos arquivos órfãos de assignfeedback_editpdf."""

from contextlib import closing
from typing import Callable, Optional

from aws_lambda_powertools import Logger

from editpdf_orphans import SERVICE_NAME
from editpdf_orphans.deleter import OrphanedFileDeleter
from editpdf_orphans.repository import EditPdfRepository, FileStorageRepository
from editpdf_orphans.scanner import OrphanScanner
from editpdf_orphans.schemas import COMPONENT, CleanupOptions, RunSummary

logger = Logger(service=SERVICE_NAME, child=True)

FIX_COMMAND = "fix-orphaned-editpdf-files --fix"

Echo = Callable[..., None]


def _stdout(text: str, end: str = "\n") -> None:
    print(text, end=end, flush=True)


class FixOrphanedFilesService:
    """
    Executa a limpeza: Scanning → (Fixing) → RelationalCleanup → Reporting.

    Repositórios podem ser injetados (testes); por padrão usam o cliente
    Supabase do processo.
    """

    def __init__(
        self,
        options: Optional[CleanupOptions] = None,
        repo: Optional[EditPdfRepository] = None,
        storage: Optional[FileStorageRepository] = None,
        echo: Optional[Echo] = None,
    ) -> None:
        self.options = options or CleanupOptions()
        self.repo = repo or EditPdfRepository()
        self.storage = storage or (FileStorageRepository() if self.options.fix else None)
        self.echo = echo or _stdout

    def run(self) -> RunSummary:
        """Executa a varredura (e a remoção, em modo fix) e retorna o resumo."""
        fix = self.options.fix
        summary = RunSummary(fix=fix)
        scanner = OrphanScanner(self.repo, page_size=self.options.page_size, destructive=fix)
        deleter = OrphanedFileDeleter(self.storage) if fix else None

        title = f"Checking for orphaned {COMPONENT} files"
        self.echo(title)
        self.echo("=" * len(title))
        logger.info("Iniciando varredura", extra={"fix": fix, "page_size": self.options.page_size})

        with closing(scanner.scan()) as records:
            for record in records:
                summary.files_found += 1
                summary.bytes_found += record.filesize
                self.echo(f"Found orphaned file: {record.filename}")

                if deleter is not None:
                    self.echo("Deleting...", end="")
                    if deleter.delete(record):
                        self.echo("  Done!")
                    else:
                        scanner.retain()
                        self.echo("  Failed!")

        if deleter is not None:
            for grade_id in deleter.grades_to_clean():
                logger.info("Limpando linhas da nota", extra={"gradeid": grade_id})
                self.echo(f"Deleting database entries for Grade: {grade_id}...", end="")
                self.repo.delete_grade_rows(grade_id)
                summary.grades_cleaned += 1
                self.echo("  Done!")
            if deleter.failed_grade_ids:
                logger.warning(
                    "Notas mantidas por falha na remoção de arquivos",
                    extra={"gradeids": sorted(deleter.failed_grade_ids)},
                )
            summary.files_removed = deleter.files_deleted
            summary.bytes_removed = deleter.bytes_deleted
            summary.files_failed = deleter.files_failed
            # Uma área apagada leva junto linhas de páginas ainda não buscadas
            summary.files_found = deleter.files_deleted + deleter.files_failed
            summary.bytes_found = deleter.bytes_deleted + deleter.bytes_failed

        self._report(summary)
        logger.info(
            "Limpeza concluída",
            extra={**summary.model_dump(), "pages_fetched": scanner.pages_fetched},
        )
        return summary

    def _report(self, summary: RunSummary) -> None:
        if summary.files_found > 0 and summary.fix:
            self.echo(
                f"Found and removed {summary.files_removed} orphaned {COMPONENT} files"
                f" freeing {summary.bytes_removed} bytes."
            )
            if summary.files_failed:
                self.echo(f"Failed to remove {summary.files_failed} orphaned {COMPONENT} files; re-run to retry.")
        elif summary.files_found > 0:
            self.echo(
                f"Found {summary.files_found} orphaned {COMPONENT} files."
                f" To fix (and free up {summary.bytes_found} bytes), run:"
            )
            self.echo(FIX_COMMAND)
        else:
            self.echo(f"No orphaned {COMPONENT} files found.")
