"""Tests for package loading: module discovery, import paths, file parsing."""

from pathlib import Path

import pytest

from logstyle.errors import LoadError
from logstyle.loader import Module, display_path, find_module, import_path_of, parse_package
from logstyle.traversal import BuildContext


def test_find_module_reads_module_line(tmp_path):
    (tmp_path / "go.mod").write_text("module example.com/app\n\ngo 1.21\n")
    sub = tmp_path / "internal" / "svc"
    sub.mkdir(parents=True)
    module = find_module(sub)
    assert module == Module(root=tmp_path.resolve(), path="example.com/app")


def test_find_module_quoted_path(tmp_path):
    (tmp_path / "go.mod").write_text('module "example.com/quoted"\n')
    assert find_module(tmp_path).path == "example.com/quoted"


def test_find_module_without_module_directive(tmp_path, caplog):
    (tmp_path / "go.mod").write_text("go 1.21\n")
    assert find_module(tmp_path) is None
    assert "No module directive" in caplog.text


def test_import_path_inside_module(tmp_path):
    module = Module(root=tmp_path.resolve(), path="example.com/app")
    assert import_path_of(tmp_path, module) == "example.com/app"
    assert import_path_of(tmp_path / "cmd" / "tool", module) == "example.com/app/cmd/tool"


def test_import_path_outside_module(tmp_path):
    assert import_path_of(tmp_path) == "_" + tmp_path.resolve().as_posix()
    other = Module(root=tmp_path.resolve() / "elsewhere", path="example.com/other")
    assert import_path_of(tmp_path, other).startswith("_/")


@pytest.mark.parametrize(
    "directory,expected",
    [
        ("./pkg", "pkg/main.go"),
        ("pkg/", "pkg/main.go"),
        ("./a/../pkg", "pkg/main.go"),
        (".", "main.go"),
        ("/abs/pkg", "/abs/pkg/main.go"),
    ],
)
def test_display_path(directory, expected):
    assert display_path(directory, "main.go") == Path(expected)


def test_parse_package(tmp_path):
    (tmp_path / "a.go").write_text("package app\n")
    (tmp_path / "b.go").write_text("// Package app does things.\npackage app\n")
    (tmp_path / "b_test.go").write_text("package app_test\n")
    parsed = parse_package(tmp_path)
    assert parsed.name == "app"
    assert [ctx.path.name for ctx in parsed.files] == ["a.go", "b.go"]
    assert all(not ctx.has_parse_errors for ctx in parsed.files)


def test_parse_package_respects_build_context(tmp_path):
    (tmp_path / "main.go").write_text("package app\n")
    (tmp_path / "main_windows.go").write_text("package app\n")
    linux = parse_package(tmp_path, build_context=BuildContext(goos="linux", goarch="amd64"))
    windows = parse_package(tmp_path, build_context=BuildContext(goos="windows", goarch="amd64"))
    assert len(linux.files) == 1
    assert len(windows.files) == 2


def test_parse_package_not_a_directory(tmp_path):
    file_path = tmp_path / "main.go"
    file_path.write_text("package main\n")
    with pytest.raises(LoadError, match="is not a directory"):
        parse_package(file_path)


def test_parse_package_missing_package_clause(tmp_path):
    (tmp_path / "main.go").write_text("// just a comment\n")
    with pytest.raises(LoadError, match="expected 'package'"):
        parse_package(tmp_path)
