"""Tests for the sass-builder command line."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from sass_builder.cli import build_parser, main, resolve_settings
from sass_builder.config_loader import load_config

from .conftest import SIMPLE_SCSS


@pytest.fixture
def project(tmp_path: Path, make_tree) -> Path:
    make_tree(
        tmp_path / "src" / "main" / "sass",
        {"a.scss": SIMPLE_SCSS, "_vars.scss": "$c: red;\n", "b/c.scss": SIMPLE_SCSS},
    )
    return tmp_path


class TestResolveSettings:
    def test_output_required_without_config(self) -> None:
        args = build_parser().parse_args([])
        with pytest.raises(ValueError, match="--output"):
            resolve_settings(args, None, Path("."))

    def test_flags_override_config(self, tmp_path: Path) -> None:
        config_path = tmp_path / "sass_builder.yaml"
        config_path.write_text("output_path: out\nprecision: 3\n", encoding="utf-8")
        args = build_parser().parse_args(
            ["styles", "--precision", "9", "--no-source-map", "--no-fail-on-error", "--parallel", "--style", "compressed"]
        )

        settings = resolve_settings(args, load_config(config_path), tmp_path)

        assert settings.input_path == "styles"
        assert settings.output_root == tmp_path / "out"
        assert settings.precision == 9
        assert settings.output_style == "compressed"
        assert settings.generate_source_map is False
        assert settings.fail_on_error is False
        assert settings.allow_parallel is True


class TestMain:
    def test_builds_project(self, project: Path, capsys: pytest.CaptureFixture[str]) -> None:
        out = project / "out"
        main(["--base-dir", str(project), "-o", str(out), "--json"])

        assert (out / "a.css").exists()
        assert (out / "b" / "c.css").exists()
        assert (out / "a.css.map").exists()
        assert not (out / "_vars.css").exists()

        printed = capsys.readouterr().out
        report = json.loads(printed[printed.index("{"):])
        assert report["total"] == 2
        assert report["failed"] == 0

    def test_failure_exits_with_one(self, project: Path) -> None:
        (project / "src" / "main" / "sass" / "broken.scss").write_text("a { color: $nope; }\n", encoding="utf-8")
        with pytest.raises(SystemExit) as excinfo:
            main(["--base-dir", str(project), "-o", str(project / "out")])
        assert excinfo.value.code == 1
        assert (project / "out" / "a.css").exists()
        assert not (project / "out" / "broken.css").exists()

    def test_failure_tolerated(self, project: Path) -> None:
        (project / "src" / "main" / "sass" / "broken.scss").write_text("a { color: $nope; }\n", encoding="utf-8")
        main(["--base-dir", str(project), "-o", str(project / "out"), "--no-fail-on-error"])
        assert (project / "out" / "a.css").exists()

    def test_write_error_exits_with_two(self, project: Path) -> None:
        blocker = project / "out"
        blocker.write_text("occupied", encoding="utf-8")
        with pytest.raises(SystemExit) as excinfo:
            main(["--base-dir", str(project), "-o", str(blocker)])
        assert excinfo.value.code == 2

    def test_missing_output_is_usage_error(self, project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(project)
        with pytest.raises(SystemExit) as excinfo:
            main([])
        assert excinfo.value.code == 2

    def test_malformed_config_is_usage_error(self, tmp_path: Path) -> None:
        config_path = tmp_path / "sass_builder.yaml"
        config_path.write_text("output_path: [unclosed\n", encoding="utf-8")
        with pytest.raises(SystemExit) as excinfo:
            main(["--config", str(config_path)])
        assert excinfo.value.code == 2

    def test_generate_config(self, tmp_path: Path) -> None:
        target = tmp_path / "generated.yaml"
        main(["--generate-config", "--config", str(target)])
        assert load_config(target).output_path == "target/css"

    def test_config_file(self, project: Path) -> None:
        config_path = project / "sass_builder.yaml"
        config_path.write_text("output_path: build/css\nsource_map:\n  generate: false\n", encoding="utf-8")
        main(["--config", str(config_path)])
        assert (project / "build" / "css" / "a.css").exists()
        assert not list((project / "build" / "css").rglob("*.map"))
