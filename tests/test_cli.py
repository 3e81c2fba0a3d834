"""Tests for the command-line entry point (create_pika_app.cli)."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from create_pika_app.cli import build_parser, main, parse_request, run
from create_pika_app.config import ISSUES_URL


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------

class TestParseRequest:
    @pytest.mark.unit
    def test_positional_name(self):
        request = parse_request(["my-app"])
        assert request.name == "my-app"
        assert request.is_absolute_path is False
        assert request.verbose is False
        assert request.show_info is False

    @pytest.mark.unit
    def test_absolute_name(self):
        request = parse_request(["/abs/path/app"])
        assert request.is_absolute_path is True

    @pytest.mark.unit
    def test_flags(self):
        request = parse_request(["my-app", "--verbose", "--info"])
        assert request.verbose is True
        assert request.show_info is True

    @pytest.mark.unit
    def test_no_name(self):
        assert parse_request([]).name is None

    @pytest.mark.unit
    def test_unknown_options_ignored(self):
        request = parse_request(["my-app", "--use-yarn", "--template=foo"])
        assert request.name == "my-app"

    @pytest.mark.unit
    def test_help_mentions_requirement_and_issue_link(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            parse_request(["--help"])
        assert exc_info.value.code == 0
        out = capsys.readouterr().out
        assert "Only <project-directory> is required." in out
        assert ISSUES_URL in out
        assert "--verbose" in out
        assert "--info" in out

    @pytest.mark.unit
    def test_version(self, capsys):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--version"])
        assert "1.0.0" in capsys.readouterr().out


# ---------------------------------------------------------------------------
# run()
# ---------------------------------------------------------------------------

class TestRun:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_relative_name_created_under_cwd(
        self, workdir: Path, fake_runner, template_source
    ):
        code = await run(
            ["my-app"], cwd=workdir, runner=fake_runner, template_source=template_source
        )
        assert code == 0
        manifest = json.loads((workdir / "my-app" / "package.json").read_text(encoding="utf-8"))
        assert manifest["scripts"]["build"] == "pika-web --dest dist/web_modules"
        assert manifest["scripts"]["start"] == "serve -s dist"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_absolute_name_ignores_cwd(
        self, workdir: Path, tmp_path: Path, fake_runner, template_source
    ):
        target = tmp_path / "abs" / "path" / "app"
        code = await run(
            [str(target)], cwd=workdir, runner=fake_runner, template_source=template_source
        )
        assert code == 0
        assert (target / "package.json").is_file()
        assert list(workdir.iterdir()) == []
        assert (target / "README.md").read_text(encoding="utf-8") == "# app\n"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_missing_name_touches_nothing(self, workdir: Path, fake_runner, capsys):
        code = await run([], cwd=workdir, runner=fake_runner)
        assert code == 1
        assert list(workdir.iterdir()) == []
        assert fake_runner.calls == []
        out = capsys.readouterr().out
        assert "No app name was provided." in out
        assert "Please specify the project name" in out

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_info_prints_report_and_touches_nothing(
        self, workdir: Path, fake_runner, capsys, monkeypatch
    ):
        monkeypatch.chdir(workdir)
        with patch("create_pika_app.info.shutil.which", return_value=None):
            code = await run(["my-app", "--info"], cwd=workdir, runner=fake_runner)
        assert code == 0
        assert list(workdir.iterdir()) == []
        out = capsys.readouterr().out
        assert "Environment Info:" in out
        assert "OS:" in out
        assert "CPU:" in out
        assert "preact" in out

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_failed_stage_returns_non_zero(
        self, workdir: Path, fake_runner, template_source, capsys
    ):
        fake_runner.failures["install"] = 1
        code = await run(
            ["my-app"], cwd=workdir, runner=fake_runner, template_source=template_source
        )
        assert code == 1
        out = capsys.readouterr().out
        assert "install-dependencies" in out

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_verbose_enables_debug_config(
        self, workdir: Path, fake_runner, template_source
    ):
        with patch("create_pika_app.cli.setup_logging") as setup_logging:
            await run(
                ["my-app", "--verbose"],
                cwd=workdir,
                runner=fake_runner,
                template_source=template_source,
            )
        setup_logging.assert_called_once_with(True)


# ---------------------------------------------------------------------------
# main()
# ---------------------------------------------------------------------------

class TestMain:
    @pytest.mark.unit
    def test_exit_code_propagates(self):
        async def fake_run(argv):
            return 1

        with patch("create_pika_app.cli.run", side_effect=fake_run):
            with pytest.raises(SystemExit) as exc_info:
                main([])
        assert exc_info.value.code == 1

    @pytest.mark.unit
    def test_keyboard_interrupt(self):
        async def interrupted(argv):
            raise KeyboardInterrupt

        with patch("create_pika_app.cli.run", side_effect=interrupted):
            with pytest.raises(SystemExit) as exc_info:
                main(["my-app"])
        assert exc_info.value.code == 130
