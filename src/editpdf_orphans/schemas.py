from typing import Literal, Tuple

from pydantic import BaseModel, ConfigDict, Field

COMPONENT = "assignfeedback_editpdf"

# importhtml fica de fora: pertence a assign_submission, não a assign_grades
FILE_AREAS: Tuple[str, ...] = ("download", "combined", "partial", "pages", "readonlypages")

FileArea = Literal["download", "combined", "partial", "pages", "readonlypages"]
AreaKey = Tuple[int, str, str, int]

DEFAULT_PAGE_SIZE = 100


class FileRecord(BaseModel):
    """Linha de files sem assign_grades correspondente (saída do scanner)."""
    id: int
    filename: str
    filesize: int = Field(ge=0)
    contextid: int
    component: Literal["assignfeedback_editpdf"]
    filearea: FileArea
    itemid: int

    model_config = ConfigDict(frozen=True)

    @property
    def grade_id(self) -> int:
        return self.itemid

    @property
    def area_key(self) -> AreaKey:
        return (self.contextid, self.component, self.filearea, self.itemid)


class CleanupOptions(BaseModel):
    """Opções de execução (flags da CLI ou payload do evento)."""
    fix: bool = Field(default=False, description="Remove arquivos e linhas; senão apenas relata")
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=10000, description="Linhas por página")


class RunSummary(BaseModel):
    """Totais acumulados durante a execução."""
    fix: bool = False
    files_found: int = 0
    bytes_found: int = 0
    files_removed: int = 0
    bytes_removed: int = 0
    files_failed: int = 0
    grades_cleaned: int = 0

    @property
    def succeeded(self) -> bool:
        return self.files_failed == 0


class AreaDeletion(BaseModel):
    """Linhas de files (e bytes) removidas ao apagar uma área."""
    files: int = 0
    bytes: int = 0

    model_config = ConfigDict(frozen=True)
