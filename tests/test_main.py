"""Tests for the clonekit command line entry point."""

from unittest.mock import patch

import pytest

from clonekit.__main__ import main


@pytest.fixture
def configure_logging():
    with patch("clonekit.__main__.configure_logging") as configure:
        yield configure


class TestMain:
    """Tests for main()."""

    def test_version(self, configure_logging, capsys) -> None:
        assert main(["--version"]) == 0
        assert capsys.readouterr().out.startswith("clonekit ")
        configure_logging.assert_not_called()

    def test_fields_for_template(self, configure_logging, capsys) -> None:
        assert main(["--no-log-file", "fields", "--template", "TPL-12"]) == 0

        lines = capsys.readouterr().out.splitlines()
        ids = [line.split("\t")[0] for line in lines]
        assert ids == ["client_name", "testimonial"]
        assert lines[0].split("\t")[1] == "client_sensitive"

    def test_fields_lists_every_definition(self, configure_logging, capsys) -> None:
        main(["fields"])
        assert len(capsys.readouterr().out.splitlines()) == 10

    def test_logging_options_are_passed_through(self, configure_logging, tmp_path) -> None:
        main(["--log-level", "DEBUG", "--log-dir", str(tmp_path), "fields"])
        configure_logging.assert_called_once_with(log_dir=tmp_path, log_level="DEBUG", log_to_file=True)

    def test_serve_runs_uvicorn(self, configure_logging) -> None:
        with patch("uvicorn.run") as run:
            assert main(["--no-log-file", "serve", "--port", "9001"]) == 0

        configure_logging.assert_called_once_with(log_dir=None, log_level=None, log_to_file=False)
        run.assert_called_once_with("clonekit.api.app:app", host="127.0.0.1", port=9001, reload=False)

    def test_serve_is_the_default(self, configure_logging) -> None:
        with patch("uvicorn.run") as run:
            main([])
        assert run.call_args.kwargs["port"] == 8000
