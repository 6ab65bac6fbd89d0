# tests/core/test_build_handler.py
import json

import pytest
from unittest.mock import MagicMock

from bundler.model import BuildError
from pydbundle.app import main
from pydbundle.core.handlers.build_handler import handle_build, read_subjects_file
from pydbundle.core.managers.config_manager import ConfigManager
from pydbundle.core.utils.path_utils import PathUtils


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    """Een lege bundler-configuratie zodat alleen de CLI-argumenten tellen."""
    settings_file = tmp_path / "settings.json"
    settings_file.write_text(json.dumps({"debug": {"level": "WARNING"}, "bundler": {"show_progress": False}}))
    monkeypatch.setattr(PathUtils, 'get_settings_file', lambda: settings_file)
    manager = ConfigManager()
    manager.reset()
    yield manager
    monkeypatch.undo()
    manager.reset()


@pytest.fixture
def site(tmp_path):
    src = tmp_path / "site"
    (src / "js").mkdir(parents=True)
    (src / "js" / "app.js").write_text("app();", encoding="utf-8")
    (src / "index.html").write_text(
        '<html><head><script src="js/app.js"></script></head><body></body></html>', encoding="utf-8")
    return src, tmp_path / "out"


def test_build_with_subject(isolated_config, site, capsys):
    src, dst = site
    exit_code = handle_build([str(src), str(dst), "--subject", "index.html"])

    assert exit_code == 0
    captured = capsys.readouterr()
    assert "Build written to" in captured.out
    assert "Transformed: 1 document(s), 1 script(s)" in captured.out
    assert "<script type=\"text/javascript\">app();</script>" in (dst / "index.html").read_text(encoding="utf-8")


def test_build_without_subjects_copies_tree(isolated_config, site):
    src, dst = site
    assert handle_build([str(src), str(dst)]) == 0
    assert (dst / "index.html").read_bytes() == (src / "index.html").read_bytes()


def test_subjects_from_config(isolated_config, site):
    src, dst = site
    isolated_config.set_nested("bundler.subjects", ["./index.html"])
    assert handle_build([str(src), str(dst)]) == 0
    assert "app();" in (dst / "index.html").read_text(encoding="utf-8")


def test_subjects_file(isolated_config, site, tmp_path):
    src, dst = site
    listing = tmp_path / "subjects.txt"
    listing.write_text("# pagina's\nindex.html  # home\n\n", encoding="utf-8")
    assert read_subjects_file(listing) == ["index.html"]
    assert handle_build([str(src), str(dst), "--subjects-file", str(listing)]) == 0
    assert "app();" in (dst / "index.html").read_text(encoding="utf-8")


def test_absolute_subject_path(isolated_config, site):
    src, dst = site
    assert handle_build([str(src), str(dst), "--subject", str(src / "index.html")]) == 0
    assert "app();" in (dst / "index.html").read_text(encoding="utf-8")


def test_missing_source_reports_error(isolated_config, tmp_path, capsys):
    exit_code = handle_build([str(tmp_path / "nope"), str(tmp_path / "out")])
    assert exit_code == 1
    assert "❌ Error" in capsys.readouterr().out


def test_invalid_preserve_pattern(isolated_config, site, capsys):
    src, dst = site
    assert handle_build([str(src), str(dst), "--preserve", "(["]) == 1
    assert "Invalid settings" in capsys.readouterr().out


def test_controller_build_error_is_caught(isolated_config, site, capsys):
    src, dst = site
    controller = MagicMock()
    controller.mirror.side_effect = BuildError(src / "index.html", "Could not read file")
    assert handle_build([str(src), str(dst)], controller=controller) == 1
    assert "index.html" in capsys.readouterr().out


def test_no_args_prints_help(capsys):
    assert handle_build([]) == 1
    assert "usage" in capsys.readouterr().out.lower()


def test_main_dispatches_build(isolated_config, site):
    src, dst = site
    assert main(["-q", "build", str(src), str(dst), "--subject", "index.html"]) == 0
    assert (dst / "index.html").exists()


def test_main_unknown_command(isolated_config, capsys):
    assert main(["deploy"]) == 1
    assert "Unknown command: deploy" in capsys.readouterr().out


def test_cli_flags_are_written_to_config(isolated_config, site):
    """CLI-vlaggen overschrijven de configuratie in het geheugen."""
    src, dst = site
    (src / "js" / "extra.css").write_text("p{}", encoding="utf-8")
    exit_code = handle_build([str(src), str(dst), "--all-html", "--discard-assets", "--no-progress"])

    assert exit_code == 0
    assert isolated_config.get_nested("bundler.all_html") is True
    assert isolated_config.get_nested("bundler.discard_assets") is True
    assert isolated_config.get_nested("bundler.show_progress") is False
    assert "app();" in (dst / "index.html").read_text(encoding="utf-8")
    assert not (dst / "js" / "extra.css").exists()
