"""Repository: acesso ao Supabase (tabelas do Moodle e bucket do filedir)."""

import os
from typing import Iterator, List, Optional

from aws_lambda_powertools import Logger
from shared.database import get_supabase_client

from editpdf_orphans import SERVICE_NAME
from editpdf_orphans.schemas import COMPONENT, FILE_AREAS, AreaDeletion, FileRecord

logger = Logger(service=SERVICE_NAME, child=True)

ORPHANS_RPC = "find_orphaned_editpdf_files"

# Linhas por página/anotação que perdem sentido quando o PDF da nota some
DEPENDENT_TABLES = (
    "assignfeedback_editpdf_annot",
    "assignfeedback_editpdf_cmnt",
    "assignfeedback_editpdf_rot",
)

# sha1("") — entradas de diretório (".") não têm conteúdo no Storage
EMPTY_CONTENTHASH = "da39a3ee5e6b4b0d3255bfef95601890afd80709"


class RecordSet:
    """Página de resultados da consulta; libera as linhas ao ser fechada."""

    def __init__(self, rows: Optional[List[dict]]) -> None:
        self._records: Optional[List[FileRecord]] = [FileRecord(**row) for row in rows or []]

    def __iter__(self) -> Iterator[FileRecord]:
        if self._records is None:
            raise RuntimeError("RecordSet já foi fechado")
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records or [])

    def valid(self) -> bool:
        return bool(self._records)

    def close(self) -> None:
        self._records = None

    def __enter__(self) -> "RecordSet":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class EditPdfRepository:
    """Consultas e remoções nas tabelas relacionais (files, assign_grades, editpdf_*)."""

    def __init__(self) -> None:
        self.db = get_supabase_client()

    def get_orphaned_files(self, offset: int, limit: int) -> RecordSet:
        """
        Busca uma página de arquivos órfãos, ordenada por files.id.

        A junção (files LEFT JOIN assign_grades ... WHERE g.id IS NULL) roda no
        Postgres, ver sql/find_orphaned_editpdf_files.sql.
        """
        logger.debug("Buscando página de órfãos", extra={"offset": offset, "limit": limit})
        res = self.db.rpc(
            ORPHANS_RPC,
            {
                "p_component": COMPONENT,
                "p_fileareas": list(FILE_AREAS),
                "p_offset": offset,
                "p_limit": limit,
            },
        ).execute()
        return RecordSet(res.data)

    def delete_records(self, table: str, **conditions) -> None:
        """Remove linhas de `table` que batem com todas as condições de igualdade."""
        if not conditions:
            raise ValueError("delete_records exige ao menos uma condição")
        query = self.db.table(table).delete()
        for column, value in conditions.items():
            query = query.eq(column, value)
        query.execute()

    def delete_grade_rows(self, grade_id: int) -> None:
        """Remove anotações, comentários e rotações ligados à nota."""
        for table in DEPENDENT_TABLES:
            self.delete_records(table, gradeid=grade_id)


class FileStorageRepository:
    """Remove áreas de arquivos: metadados em files + blobs no bucket do filedir."""

    def __init__(self, bucket: Optional[str] = None) -> None:
        self.db = get_supabase_client()
        self.bucket = bucket or os.environ.get("FILEDIR_BUCKET", "filedir")

    @staticmethod
    def content_path(contenthash: str) -> str:
        """Path do blob no bucket, no layout do filedir (ab/cd/abcd...)."""
        return f"{contenthash[0:2]}/{contenthash[2:4]}/{contenthash}"

    def _is_referenced_elsewhere(self, contenthash: str, area_ids: List[int]) -> bool:
        res = (
            self.db.table("files")
            .select("id")
            .eq("contenthash", contenthash)
            .not_.in_("id", area_ids)
            .limit(1)
            .execute()
        )
        return bool(res.data)

    def delete_area_files(
        self, contextid: int, component: str, filearea: str, itemid: int
    ) -> Optional[AreaDeletion]:
        """
        Remove todos os arquivos de (contextid, component, filearea, itemid).

        Retorna quantas linhas de files saíram e a soma de filesize, ou None se
        algum blob não pôde ser removido; nesse caso as linhas são mantidas
        para que a próxima execução tente de novo. Área já vazia retorna zero.
        """
        res = (
            self.db.table("files")
            .select("id, contenthash, filesize")
            .eq("contextid", contextid)
            .eq("component", component)
            .eq("filearea", filearea)
            .eq("itemid", itemid)
            .execute()
        )
        rows = res.data or []
        if not rows:
            return AreaDeletion()

        area_ids = [row["id"] for row in rows]
        hashes = sorted({row["contenthash"] for row in rows if row.get("contenthash")})
        for contenthash in hashes:
            if contenthash == EMPTY_CONTENTHASH or self._is_referenced_elsewhere(contenthash, area_ids):
                continue
            path = self.content_path(contenthash)
            try:
                self.db.storage.from_(self.bucket).remove([path])
            except Exception as e:
                logger.warning(
                    "Falha ao deletar blob",
                    extra={
                        "path": path,
                        "area": [contextid, component, filearea, itemid],
                        "error": str(e),
                    },
                )
                return None

        self.db.table("files").delete().in_("id", area_ids).execute()
        return AreaDeletion(files=len(rows), bytes=sum(row.get("filesize") or 0 for row in rows))
