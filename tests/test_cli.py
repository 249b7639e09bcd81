"""CLI parser and entrypoint tests."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from msggen.cli import _build_parser, main
from tests._fixtures.definition_tree import DefinitionTreeBuilder


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "generate"])
    assert args.verbose is True
    assert args.command == "generate"


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["generate", "--verbose"])
    assert args.verbose is True


def test_cli_parses_generate_options() -> None:
    parser = _build_parser()
    args = parser.parse_args(
        ["generate", "-p", "a", "-o", "out", "-n", "pkgA", "pkgB", "-s", "src"]
    )
    assert args.package_path == "a"
    assert args.output_path == Path("out")
    assert args.package_names == ["pkgA", "pkgB"]
    assert args.sources == "src"


def test_generate_uses_package_path_from_environment(
    tree: DefinitionTreeBuilder,
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.chdir(tmp_path)
    tree.message("pkgA", "Point", "float64 x\n")
    tree.message("pkgB", "Empty", "")
    output = tmp_path / "out"

    main(
        ["generate", "-o", str(output), "-s", str(tree.path())],
        environ={"ROS_PACKAGE_PATH": os.pathsep.join([str(tree.path()), str(tmp_path / "nope")])},
    )

    assert (output / "pkgA" / "Point.java").exists()
    assert (output / "pkgB" / "Empty.java").exists()
    assert "Generated 2 of 2 interfaces" in capsys.readouterr().out


def test_generate_exits_non_zero_when_units_fail(
    tree: DefinitionTreeBuilder, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)
    tree.message("pkgA", "Broken", "pkgA/Missing m\n")

    with pytest.raises(SystemExit) as excinfo:
        main(
            ["generate", "-p", str(tree.path()), "-s", str(tree.path()), "-o", str(tmp_path / "out")],
            environ={},
        )
    assert excinfo.value.code == 1


def test_generate_without_package_path_is_a_configuration_error(
    tree: DefinitionTreeBuilder,
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.chdir(tmp_path)

    with pytest.raises(SystemExit) as excinfo:
        main(["generate", "-s", str(tree.path())], environ={})
    assert excinfo.value.code == 1
    assert "No package path supplied" in capsys.readouterr().err


def test_generate_reads_config_file(
    tree: DefinitionTreeBuilder, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    tree.message("pkgA", "Point", "float64 x\n")
    (tmp_path / ".msggen.yml").write_text(
        "package_path: ws\nsources: ws\noutput_path: generated\n", encoding="utf-8"
    )
    monkeypatch.chdir(tmp_path)

    main(["generate"], environ={})

    assert (tmp_path / "generated" / "pkgA" / "Point.java").exists()


def test_generate_writes_unit_tagged_log_file_from_config(
    tree: DefinitionTreeBuilder, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    tree.message("pkgA", "Point", "float64 x\n")
    tree.message("pkgA", "Broken", "pkgA/Missing m\n")
    (tmp_path / ".msggen.yml").write_text(
        "package_path: ws\nsources: ws\noutput_path: generated\nlog_file: logs/run.log\n",
        encoding="utf-8",
    )
    monkeypatch.chdir(tmp_path)

    with pytest.raises(SystemExit):
        main(["generate"], environ={})

    log_text = (tmp_path / "logs" / "run.log").read_text(encoding="utf-8")
    assert "[pkgA/Point] Generated interface for pkgA/Point" in log_text
    assert "[pkgA/Broken] Failed to generate interface for pkgA/Broken" in log_text
    assert "[-] Generation finished" in log_text


def test_resolve_prints_closure(
    tree: DefinitionTreeBuilder,
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.chdir(tmp_path)
    tree.message("pkgA", "Point", "float64 x\n")
    tree.message("pkgA", "Path", "Point[] points\n")

    main(["resolve", "pkgA/Path", "-p", str(tree.path())], environ={})

    out = capsys.readouterr().out
    assert out.startswith("Point[] points\n")
    assert "MSG: pkgA/Point\nfloat64 x\n" in out
