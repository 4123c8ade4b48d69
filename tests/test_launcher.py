"""
Launcher Tests
==============
Argument parsing and startup of pagepix_tui without a real terminal.
"""

import builtins
import sys
import types
from pathlib import Path

import pytest

import pagepix_tui


class FakeApp:
    instances = []

    def __init__(self, options=None, config=None):
        self.options = options
        self.config = config
        self.ran = False
        FakeApp.instances.append(self)

    def run(self):
        self.ran = True


@pytest.fixture
def fake_tui(monkeypatch):
    from pagepix.tui.app import LaunchOptions

    module = types.ModuleType("pagepix.tui.app")
    module.PagePixTUI = FakeApp
    module.LaunchOptions = LaunchOptions
    monkeypatch.setitem(sys.modules, "pagepix.tui.app", module)
    FakeApp.instances = []
    return module


class TestParser:
    def test_defaults(self):
        args = pagepix_tui.build_parser().parse_args([])
        assert args.source is None
        assert args.data_dir is None
        assert args.log_level == "INFO"

    def test_log_level_is_case_insensitive(self):
        args = pagepix_tui.build_parser().parse_args(["--log-level", "debug"])
        assert args.log_level == "DEBUG"

    def test_rejects_unknown_level(self, capsys):
        with pytest.raises(SystemExit):
            pagepix_tui.build_parser().parse_args(["--log-level", "chatty"])

    def test_paths(self):
        args = pagepix_tui.build_parser().parse_args(["--source", "a.pdf", "--data-dir", "/tmp/pp"])
        assert args.source == Path("a.pdf")
        assert args.data_dir == Path("/tmp/pp")


class TestMain:
    def test_runs_app_with_config(self, mocker, fake_tui, tmp_path):
        configure = mocker.patch.object(pagepix_tui, "configure_logging")
        pdf = tmp_path / "report.pdf"

        code = pagepix_tui.main(["--data-dir", str(tmp_path / "data"), "--source", str(pdf)])

        assert code == 0
        app = FakeApp.instances[-1]
        assert app.ran is True
        assert app.config.data_dir == tmp_path / "data"
        assert app.options.source == pdf.resolve()
        configure.assert_called_once_with(tmp_path / "data" / "pagepix.log", "INFO")

    def test_missing_textual(self, mocker, monkeypatch, tmp_path, capsys):
        mocker.patch.object(pagepix_tui, "configure_logging")
        real_import = builtins.__import__

        def fake_import(name, *args, **kwargs):
            if name == "pagepix.tui.app":
                raise ImportError("No module named 'textual'")
            return real_import(name, *args, **kwargs)

        monkeypatch.setattr(builtins, "__import__", fake_import)

        code = pagepix_tui.main(["--data-dir", str(tmp_path / "data")])

        assert code == 1
        assert "Textual is not installed" in capsys.readouterr().err

    def test_configure_logging_writes_file(self, tmp_path, monkeypatch):
        import logging

        root = logging.getLogger()
        monkeypatch.setattr(root, "handlers", [])
        monkeypatch.setattr(root, "level", root.level)
        log_path = tmp_path / "pagepix.log"

        pagepix_tui.configure_logging(log_path, "WARNING")
        logging.getLogger("pagepix.test").warning("hello log")
        for handler in root.handlers:
            handler.flush()
            handler.close()

        assert "hello log" in log_path.read_text()
        assert root.level == logging.WARNING
