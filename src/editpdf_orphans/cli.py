"""Entrada de linha de comando: fix-orphaned-editpdf-files [-f|--fix]."""

import argparse
import sys
from typing import List, Optional

from aws_lambda_powertools import Logger

from editpdf_orphans import SERVICE_NAME
from editpdf_orphans.schemas import CleanupOptions
from editpdf_orphans.service import FixOrphanedFilesService

# Logs estruturados vão para stderr; stdout fica só com o relatório
logger = Logger(service=SERVICE_NAME, stream=sys.stderr)

DESCRIPTION = """Fix orphaned assignfeedback_editpdf files.

This script detects assignfeedback_editpdf files and database rows
left orphaned after a Course reset and deletes them."""

EPILOG = """Example:
  $ fix-orphaned-editpdf-files
  $ fix-orphaned-editpdf-files -f"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fix-orphaned-editpdf-files",
        description=DESCRIPTION,
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-f",
        "--fix",
        action="store_true",
        help="Fix the orphaned assignfeedback_editpdf files on the filesystem and in the DB. "
        "If not specified only check and report problems.",
    )
    return parser


def parse_args(argv: Optional[List[str]] = None) -> CleanupOptions:
    parser = build_parser()
    args, unrecognized = parser.parse_known_args(argv)
    if unrecognized:
        parser.error("Unknown option(s):\n  " + "\n  ".join(unrecognized))
    return CleanupOptions(fix=args.fix)


def main(argv: Optional[List[str]] = None) -> int:
    options = parse_args(argv)
    try:
        summary = FixOrphanedFilesService(options).run()
    except Exception:
        logger.exception("Erro na limpeza de arquivos órfãos")
        print("Aborted: see the log above. Re-running is safe.", file=sys.stderr)
        return 1
    return 0 if summary.succeeded else 1


if __name__ == "__main__":
    sys.exit(main())
