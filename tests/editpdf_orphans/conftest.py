import pytest

from editpdf_orphans.repository import DEPENDENT_TABLES, RecordSet
from editpdf_orphans.schemas import COMPONENT, FILE_AREAS, AreaDeletion


class InMemoryMoodle:
    """
    Base em memória com files, assign_grades e tabelas dependentes.

    Implementa as interfaces do EditPdfRepository e do FileStorageRepository
    usadas pelo service, registrando as chamadas para as asserções.
    """

    def __init__(self) -> None:
        self.files = []
        self.grades = set()
        self.dependent = {table: [] for table in DEPENDENT_TABLES}
        self.fetches = []
        self.area_deletes = []
        self.grade_deletes = []
        self.failing_areas = set()
        self.open_recordsets = 0
        self._next_id = 1

    def add_file(self, itemid, filearea="download", filesize=100, contextid=10, component=COMPONENT, filename=None):
        row = {
            "id": self._next_id,
            "filename": filename or f"file{self._next_id}.pdf",
            "filesize": filesize,
            "contextid": contextid,
            "component": component,
            "filearea": filearea,
            "itemid": itemid,
        }
        self._next_id += 1
        self.files.append(row)
        return row

    def add_dependent_rows(self, gradeid):
        for table in DEPENDENT_TABLES:
            self.dependent[table].append(gradeid)

    def _orphans(self):
        return [
            row
            for row in sorted(self.files, key=lambda r: r["id"])
            if row["component"] == COMPONENT
            and row["filearea"] in FILE_AREAS
            and row["itemid"] not in self.grades
        ]

    # EditPdfRepository
    def get_orphaned_files(self, offset, limit):
        self.fetches.append((offset, limit))
        recordset = _TrackedRecordSet(self, self._orphans()[offset:offset + limit])
        self.open_recordsets += 1
        return recordset

    def delete_grade_rows(self, grade_id):
        self.grade_deletes.append(grade_id)
        for table in DEPENDENT_TABLES:
            self.dependent[table] = [g for g in self.dependent[table] if g != grade_id]

    # FileStorageRepository
    def delete_area_files(self, contextid, component, filearea, itemid):
        key = (contextid, component, filearea, itemid)
        self.area_deletes.append(key)
        if key in self.failing_areas:
            return None
        removed = [row for row in self.files if _area_of(row) == key]
        self.files = [row for row in self.files if _area_of(row) != key]
        return AreaDeletion(files=len(removed), bytes=sum(row["filesize"] for row in removed))


def _area_of(row):
    return (row["contextid"], row["component"], row["filearea"], row["itemid"])


class _TrackedRecordSet(RecordSet):
    def __init__(self, store, rows):
        super().__init__(rows)
        self._store = store

    def close(self):
        if self._records is not None:
            self._store.open_recordsets -= 1
        super().close()


@pytest.fixture
def store() -> InMemoryMoodle:
    return InMemoryMoodle()


@pytest.fixture
def output():
    """Captura as linhas emitidas pelo service (echo)."""
    lines = []

    def echo(text: str, end: str = "\n") -> None:
        if lines and not lines[-1].endswith("\n"):
            lines[-1] += text + end
        else:
            lines.append(text + end)

    echo.lines = lines
    echo.text = lambda: "".join(lines)
    return echo
