import pytest
from unittest.mock import patch, MagicMock

from editpdf_orphans.cli import main, parse_args
from editpdf_orphans.schemas import RunSummary


@pytest.fixture
def mock_service():
    with patch("editpdf_orphans.cli.FixOrphanedFilesService") as mock_cls:
        instance = MagicMock()
        mock_cls.return_value = instance
        yield mock_cls


class TestParseArgs:
    """Flags -f/--fix e -h/--help; opções desconhecidas abortam antes de acessar dados."""

    @pytest.mark.parametrize("argv", [["-f"], ["--fix"]])
    def test_fix_flag(self, argv) -> None:
        assert parse_args(argv).fix is True

    def test_default_is_dry_run(self) -> None:
        options = parse_args([])
        assert options.fix is False
        assert options.page_size == 100

    def test_unknown_option_exits_with_error(self, capsys, mock_service: MagicMock) -> None:
        """
        Cenário: opção desconhecida (--force).
        Esperado: erro citando a opção, saída != 0 e service nunca criado.
        """
        with pytest.raises(SystemExit) as exc_info:
            main(["--force"])

        assert exc_info.value.code != 0
        assert "--force" in capsys.readouterr().err
        mock_service.assert_not_called()

    def test_help_prints_usage_and_exits_zero(self, capsys, mock_service: MagicMock) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--help"])

        assert exc_info.value.code == 0
        out = capsys.readouterr().out
        assert "--fix" in out
        assert "Fix orphaned assignfeedback_editpdf files." in out
        mock_service.assert_not_called()


class TestMain:
    def test_successful_run_returns_zero(self, mock_service: MagicMock) -> None:
        mock_service.return_value.run.return_value = RunSummary(fix=True, files_found=2, files_removed=2)

        assert main(["--fix"]) == 0

        options = mock_service.call_args.args[0]
        assert options.fix is True

    def test_failed_files_return_one(self, mock_service: MagicMock) -> None:
        mock_service.return_value.run.return_value = RunSummary(fix=True, files_found=2, files_removed=1, files_failed=1)

        assert main(["-f"]) == 1

    def test_store_error_returns_one(self, capsys, mock_service: MagicMock) -> None:
        """
        Cenário: erro de I/O no banco durante a varredura.
        Esperado: saída 1 e aviso de abort no stderr.
        """
        mock_service.return_value.run.side_effect = ConnectionError("timeout")

        assert main([]) == 1
        assert "Aborted" in capsys.readouterr().err
