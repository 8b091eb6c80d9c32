"""Detecta e remove arquivos órfãos de assignfeedback_editpdf (Storage + tabelas dependentes)."""

SERVICE_NAME = "fix-orphaned-editpdf-files"
