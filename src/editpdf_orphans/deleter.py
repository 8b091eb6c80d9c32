"""Deleter: remove os blobs de cada área órfã e acumula as notas para limpeza relacional."""

from typing import List, Set

from aws_lambda_powertools import Logger

from editpdf_orphans import SERVICE_NAME
from editpdf_orphans.schemas import AreaKey, FileRecord

logger = Logger(service=SERVICE_NAME, child=True)


class OrphanedFileDeleter:
    """
    Coordena a remoção dos arquivos órfãos.

    Política de falha: uma nota só entra na limpeza relacional se TODOS os
    seus arquivos foram removidos. Se um blob falha, a área inteira fica como
    está (não é tentada de novo nesta execução) e a nota é excluída da
    limpeza, preservando anotações/comentários de um arquivo que ainda existe.

    Os totais removidos vêm do que cada área realmente apagou em files, que
    pode incluir linhas de páginas que o scanner ainda não buscou.
    """

    def __init__(self, storage) -> None:
        self.storage = storage
        self.grade_ids: Set[int] = set()
        self.failed_grade_ids: Set[int] = set()
        self._deleted_areas: Set[AreaKey] = set()
        self._failed_areas: Set[AreaKey] = set()
        self.files_deleted = 0
        self.bytes_deleted = 0
        self.files_failed = 0
        self.bytes_failed = 0

    def delete(self, record: FileRecord) -> bool:
        """Remove a área do registro (uma vez por área). Retorna se o registro saiu da base."""
        area = record.area_key
        if area in self._failed_areas:
            return self._fail(record)

        if area not in self._deleted_areas:
            removed = self.storage.delete_area_files(*area)
            if removed is None:
                self._failed_areas.add(area)
                logger.warning(
                    "Área não removida",
                    extra={"area": list(area), "file_id": record.id, "gradeid": record.grade_id},
                )
                return self._fail(record)
            self._deleted_areas.add(area)
            self.files_deleted += removed.files
            self.bytes_deleted += removed.bytes

        self.grade_ids.add(record.grade_id)
        return True

    def _fail(self, record: FileRecord) -> bool:
        self.failed_grade_ids.add(record.grade_id)
        self.files_failed += 1
        self.bytes_failed += record.filesize
        return False

    def grades_to_clean(self) -> List[int]:
        return sorted(self.grade_ids - self.failed_grade_ids)
