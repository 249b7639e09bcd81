"""Tests for msggen.orchestrator."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from msggen.emit import Emitter
from msggen.errors import ConfigError, EmitterError, GenerationRunError
from msggen.models import ResolvedDeclaration, TypeIdentifier
from msggen.orchestrator import Orchestrator
from tests._fixtures.definition_tree import DefinitionTreeBuilder


class RecordingEmitter(Emitter):
    """Test double that records every unit and renders the closure text."""

    extension = "txt"

    def __init__(self, failing: set[str] | None = None) -> None:
        self.calls: list[tuple[str, bool]] = []
        self.failing = failing or set()

    def emit(self, declaration: ResolvedDeclaration, is_message: bool) -> str:
        self.calls.append((declaration.full_name, is_message))
        if declaration.full_name in self.failing:
            raise EmitterError(f"cannot render {declaration.full_name}")
        return declaration.text


def _seed_points(tree: DefinitionTreeBuilder) -> None:
    tree.message("pkgA", "Point", "float64 x\nfloat64 y\n")
    tree.message("pkgA", "Path", "pkgA/Point[] points\n")


def _generated(output: Path) -> list[str]:
    return sorted(path.relative_to(output).as_posix() for path in output.rglob("*") if path.is_file())


def test_point_and_path_generate_exactly_two_files(tree: DefinitionTreeBuilder, tmp_path: Path) -> None:
    _seed_points(tree)
    output = tmp_path / "out"

    report = Orchestrator().generate(output, ["pkgA"], [tree.path()], [tree.path()])

    assert report.succeeded
    assert report.attempted == ["pkgA/Path", "pkgA/Point"]
    assert _generated(output) == ["pkgA/Path.java", "pkgA/Point.java"]
    path_source = (output / "pkgA" / "Path.java").read_text(encoding="utf-8")
    assert "java.util.List<pkgA.Point> getPoints();" in path_source
    assert path_source.count("MSG: pkgA/Point") == 1


def test_no_requested_packages_generates_everything(tree: DefinitionTreeBuilder, tmp_path: Path) -> None:
    _seed_points(tree)
    tree.message("pkgB", "Line", "pkgA/Point start\npkgA/Point end\n")
    emitter = RecordingEmitter()
    output = tmp_path / "out"

    report = Orchestrator(emitter).generate(output, [], [tree.path()], [tree.path()])

    assert [name for name, _ in emitter.calls] == ["pkgA/Path", "pkgA/Point", "pkgB/Line"]
    line = (output / "pkgB" / "Line.txt").read_text(encoding="utf-8")
    assert line.count("MSG: pkgA/Point\n") == 1
    assert report.empty_packages == []


def test_service_produces_container_request_and_response(
    tree: DefinitionTreeBuilder, tmp_path: Path
) -> None:
    _seed_points(tree)
    tree.service("pkgA", "Goto", "Point target\n---\nbool reached\n")
    emitter = RecordingEmitter()
    output = tmp_path / "out"

    report = Orchestrator(emitter).generate(output, ["pkgA"], [tree.path()], [tree.path()])

    assert emitter.calls[-3:] == [
        ("pkgA/Goto", False),
        ("pkgA/GotoRequest", True),
        ("pkgA/GotoResponse", True),
    ]
    request = (output / "pkgA" / "GotoRequest.txt").read_text(encoding="utf-8")
    assert request.startswith("Point target\n")
    assert "MSG: pkgA/Point" in request
    response = (output / "pkgA" / "GotoResponse.txt").read_text(encoding="utf-8")
    assert response == "bool reached\n"
    assert report.succeeded


def test_service_with_two_separators_fails_container_and_halves(
    tree: DefinitionTreeBuilder, tmp_path: Path
) -> None:
    _seed_points(tree)
    tree.service("pkgA", "Bad", "int32 a\n---\nint32 b\n---\nint32 c\n")
    emitter = RecordingEmitter()
    output = tmp_path / "out"

    report = Orchestrator(emitter).generate(output, ["pkgA"], [tree.path()], [tree.path()])

    assert [failure.full_name for failure in report.failures] == [
        "pkgA/Bad",
        "pkgA/BadRequest",
        "pkgA/BadResponse",
    ]
    assert "separator" in report.failures[0].error
    assert all(not name.startswith("pkgA/Bad") for name, _ in emitter.calls)
    assert _generated(output) == ["pkgA/Path.txt", "pkgA/Point.txt"]


def test_unresolvable_reference_fails_only_that_message(
    tree: DefinitionTreeBuilder, tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    _seed_points(tree)
    tree.message("pkgA", "Broken", "pkgA/Missing m\n")
    output = tmp_path / "out"

    with caplog.at_level(logging.INFO, logger="msggen"):
        report = Orchestrator().generate(output, ["pkgA"], [tree.path()], [tree.path()])

    assert [failure.full_name for failure in report.failures] == ["pkgA/Broken"]
    assert "pkgA/Missing" in report.failures[0].error
    assert _generated(output) == ["pkgA/Path.java", "pkgA/Point.java"]
    messages = [record.getMessage() for record in caplog.records]
    assert any("Failed to generate interface for pkgA/Broken" in message for message in messages)
    assert any("Generated interface for pkgA/Point" in message for message in messages)


def test_emitter_failure_is_isolated(tree: DefinitionTreeBuilder, tmp_path: Path) -> None:
    _seed_points(tree)
    emitter = RecordingEmitter(failing={"pkgA/Path"})

    report = Orchestrator(emitter).generate(
        tmp_path / "out", ["pkgA"], [tree.path()], [tree.path()]
    )

    assert [failure.full_name for failure in report.failures] == ["pkgA/Path"]
    assert report.attempted == ["pkgA/Path", "pkgA/Point"]
    assert [path.name for path in report.generated] == ["Point.txt"]


def test_missing_package_warns_and_generates_nothing(
    tree: DefinitionTreeBuilder, tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    _seed_points(tree)
    output = tmp_path / "out"

    with caplog.at_level(logging.WARNING, logger="msggen"):
        report = Orchestrator().generate(output, ["ghost"], [tree.path()], [tree.path()])

    assert report.empty_packages == ["ghost"]
    assert report.attempted == []
    assert _generated(output) == []
    assert any("No interfaces found for package ghost" in r.getMessage() for r in caplog.records)


def test_missing_package_among_others(tree: DefinitionTreeBuilder, tmp_path: Path) -> None:
    _seed_points(tree)

    report = Orchestrator(RecordingEmitter()).generate(
        tmp_path / "out", ["ghost", "pkgA"], [tree.path()], [tree.path()]
    )

    assert report.empty_packages == ["ghost"]
    assert report.attempted == ["pkgA/Path", "pkgA/Point"]


def test_single_package_override_uses_requested_name(
    tree: DefinitionTreeBuilder, tmp_path: Path
) -> None:
    checkout = tree.directory("robot-msgs-main")
    tree.write({"msg/Status.msg": "uint8 level\n"}, root=checkout)
    output = tmp_path / "out"

    report = Orchestrator(RecordingEmitter()).generate(output, ["robot_msgs"], [checkout], [checkout])

    assert report.attempted == ["robot_msgs/Status"]
    assert _generated(output) == ["robot_msgs/Status.txt"]


def test_generate_is_idempotent(tree: DefinitionTreeBuilder, tmp_path: Path) -> None:
    _seed_points(tree)
    tree.service("pkgA", "Goto", "Point target\n---\nbool reached\n")
    output = tmp_path / "out"

    Orchestrator().generate(output, [], [tree.path()], [tree.path()])
    first = {name: (output / name).read_bytes() for name in _generated(output)}
    Orchestrator().generate(output, [], [tree.path()], [tree.path()])
    second = {name: (output / name).read_bytes() for name in _generated(output)}

    assert first == second
    assert len(first) == 5


def test_missing_roots_are_configuration_errors(tree: DefinitionTreeBuilder, tmp_path: Path) -> None:
    orchestrator = Orchestrator()
    with pytest.raises(ConfigError):
        orchestrator.generate(tmp_path / "out", [], [], [tree.path()])
    with pytest.raises(ConfigError):
        orchestrator.generate(tmp_path / "out", [], [tree.path()], [])
    assert not (tmp_path / "out").exists()


def test_output_directory_failure_is_fatal(tree: DefinitionTreeBuilder, tmp_path: Path) -> None:
    _seed_points(tree)
    blocked = tmp_path / "out"
    blocked.write_text("not a directory", encoding="utf-8")

    with pytest.raises(GenerationRunError):
        Orchestrator().generate(blocked, ["pkgA"], [tree.path()], [tree.path()])


def test_resolve_returns_single_declaration(tree: DefinitionTreeBuilder) -> None:
    _seed_points(tree)
    tree.service("pkgA", "Goto", "Point target\n---\nbool reached\n")

    path = Orchestrator().resolve("pkgA/Path", [tree.path()])
    service = Orchestrator().resolve("pkgA/Goto", [tree.path()])

    assert path.dependencies == (TypeIdentifier("pkgA", "Point"),)
    assert service.is_message is False
    assert service.dependencies == (TypeIdentifier("pkgA", "Point"),)


def test_undecodable_definition_fails_only_that_type(
    tree: DefinitionTreeBuilder, tmp_path: Path
) -> None:
    _seed_points(tree)
    (tree.path() / "pkgA" / "msg" / "Bad.msg").write_bytes(b"string s\xff\xfe\n")
    tree.message("pkgA", "UsesBad", "pkgA/Bad inner\n")
    output = tmp_path / "out"

    report = Orchestrator(RecordingEmitter()).generate(
        output, ["pkgA"], [tree.path()], [tree.path()]
    )

    failures = {failure.full_name: failure.error for failure in report.failures}
    assert set(failures) == {"pkgA/Bad", "pkgA/UsesBad"}
    assert "Bad.msg" in failures["pkgA/Bad"]
    assert "pkgA/Bad" in failures["pkgA/UsesBad"]
    assert _generated(output) == ["pkgA/Path.txt", "pkgA/Point.txt"]


def test_missing_package_root_does_not_block_single_package_override(
    tree: DefinitionTreeBuilder, tmp_path: Path
) -> None:
    checkout = tree.directory("robot-msgs-main")
    tree.write({"msg/Status.msg": "uint8 level\n"}, root=checkout)
    output = tmp_path / "out"

    report = Orchestrator(RecordingEmitter()).generate(
        output, ["robot_msgs"], [tmp_path / "gone", checkout], [checkout]
    )

    assert report.attempted == ["robot_msgs/Status"]
    assert report.empty_packages == []
    assert _generated(output) == ["robot_msgs/Status.txt"]


def test_reused_orchestrator_scans_only_the_current_roots(
    tree: DefinitionTreeBuilder, tmp_path: Path
) -> None:
    _seed_points(tree)
    other = tree.directory("other")
    tree.message("pkgB", "Line", "float64 length\n", root=other)
    orchestrator = Orchestrator(RecordingEmitter())

    first = orchestrator.generate(tmp_path / "first", [], [tree.path()], [tree.path()])
    second = orchestrator.generate(tmp_path / "second", [], [other], [other])

    assert first.attempted == ["pkgA/Path", "pkgA/Point"]
    assert second.attempted == ["pkgB/Line"]
