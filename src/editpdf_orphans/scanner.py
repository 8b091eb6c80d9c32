"""Scanner: percorre os arquivos órfãos página a página sem carregar tudo em memória."""

from typing import Iterator

from aws_lambda_powertools import Logger

from editpdf_orphans import SERVICE_NAME
from editpdf_orphans.schemas import DEFAULT_PAGE_SIZE, FileRecord

logger = Logger(service=SERVICE_NAME, child=True)


class OrphanScanner:
    """
    Gera os FileRecord órfãos em páginas de `page_size`.

    Com `destructive=True` quem consome apaga cada registro, então o conjunto
    encolhe a cada página e o offset não avança: volta para o início do que
    sobrou. Registros que continuam na base (falha ao apagar) devem ser
    informados via `retain()`; como a ordem é por files.id eles ficam sempre
    na frente, e o offset passa a ser o total retido.
    """

    def __init__(self, repo, page_size: int = DEFAULT_PAGE_SIZE, destructive: bool = False) -> None:
        if page_size < 1:
            raise ValueError("page_size deve ser >= 1")
        self.repo = repo
        self.page_size = page_size
        self.destructive = destructive
        self.pages_fetched = 0
        self._retained = 0

    def retain(self) -> None:
        """Marca o último registro entregue como ainda presente na base."""
        self._retained += 1

    def scan(self) -> Iterator[FileRecord]:
        offset = 0
        while True:
            with self.repo.get_orphaned_files(offset, self.page_size) as recordset:
                self.pages_fetched += 1
                fetched = len(recordset)
                logger.debug("Página recebida", extra={"offset": offset, "size": fetched})
                yield from recordset

            # Página incompleta (ou vazia): não há mais linhas depois dela
            if fetched < self.page_size:
                return

            if self.destructive:
                offset = self._retained
            else:
                offset += self.page_size
