"""End-to-end tests for the analysis pipeline: load, type-check, walk, report."""

import io
from pathlib import Path

import pytest

from logstyle.analyzer import analyze, load_program
from logstyle.errors import LoadError, TypeCheckError

STRING_CONSTANT = """package main
import "go.uber.org/zap"
func main() {
	logger := zap.NewNop()
	logger.Info("Hello, World!")
}
"""

SPRINTF = """package main
import (
	"fmt"
	"go.uber.org/zap"
)
func main() {
	logger := zap.NewNop()
	logger.Info(fmt.Sprintf("Hello, %s!", "World"))
}
"""

STRUCT_FIELD = """package main
import "go.uber.org/zap"
type A struct {
	Logger *zap.Logger
}
func main() {
	a := A{
		Logger: zap.NewNop(),
	}
	msg := "Hello, World!"
	a.Logger.Info(msg)
}
"""

VENDORED_ZAP = """package zap

type Field struct {
	Key string
}

type Logger struct {
	name string
}

func NewNop() *Logger { return &Logger{} }

func (log *Logger) Info(msg string, fields ...Field) {
	log.check(msg)
}

func (log *Logger) check(msg string) {}
"""


def _normalize(output: str, prefix: str) -> str:
    """Strip the package directory prefix from every line."""
    return "".join(
        (line[len(prefix) :] if line.startswith(prefix) else line) + "\n"
        for line in output.splitlines()
    )


def _run(directory) -> str:
    out = io.StringIO()
    analyze(out, directory)
    return out.getvalue()


@pytest.mark.parametrize(
    "source,expected",
    [
        (STRING_CONSTANT, ""),
        (SPRINTF, "main.go:8:2: call must use a string literal or a constant\n"),
        (STRUCT_FIELD, "main.go:11:2: call must use a string literal or a constant\n"),
    ],
    ids=["StringConstant", "Sprintf", "Struct"],
)
def test_scenarios(tmp_path, monkeypatch, source, expected):
    pkg = tmp_path / "fakepkg"
    pkg.mkdir()
    (pkg / "main.go").write_text(source)
    monkeypatch.chdir(tmp_path)

    got = _run("./fakepkg")
    assert _normalize(got, "fakepkg/") == expected


def test_absolute_directory_prefix(tmp_path):
    (tmp_path / "main.go").write_text(SPRINTF)
    got = _run(str(tmp_path))
    assert got == f"{tmp_path}/main.go:8:2: call must use a string literal or a constant\n"


def test_files_in_name_order(tmp_path):
    body = 'package main\nimport "go.uber.org/zap"\nfunc {name}(m string) {{\n\tzap.L().Warn(m)\n}}\n'
    (tmp_path / "b.go").write_text(body.format(name="b"))
    (tmp_path / "a.go").write_text(body.format(name="a"))
    (tmp_path / "main.go").write_text("package main\nfunc main() {}\n")
    lines = _normalize(_run(str(tmp_path)), f"{tmp_path}/").splitlines()
    assert lines == [
        "a.go:4:2: call must use a string literal or a constant",
        "b.go:4:2: call must use a string literal or a constant",
    ]


def test_test_files_are_not_analyzed(tmp_path):
    (tmp_path / "main.go").write_text(STRING_CONSTANT)
    (tmp_path / "main_test.go").write_text(SPRINTF.replace("func main()", "func helper()"))
    assert _run(str(tmp_path)) == ""


def test_idempotent_output(tmp_path):
    (tmp_path / "main.go").write_text(STRUCT_FIELD)
    (tmp_path / "other.go").write_text(
        'package main\nimport "go.uber.org/zap"\nfunc other(l *zap.Logger, s string) {\n\tl.Error(s + "!")\n}\n'
    )
    first = _run(str(tmp_path))
    second = _run(str(tmp_path))
    assert first == second
    assert len(first.splitlines()) == 2


def test_summary_counts(tmp_path):
    (tmp_path / "main.go").write_text(SPRINTF)
    summary = analyze(io.StringIO(), str(tmp_path))
    assert [p.name for p in summary.files] == ["main.go"]
    assert summary.total == 1
    assert summary.rule_ids == ["zap-logger-message"]


def test_vendored_zap_in_module(tmp_path):
    (tmp_path / "go.mod").write_text("module example.com/app\n\ngo 1.21\n")
    vendored = tmp_path / "vendor" / "go.uber.org" / "zap"
    vendored.mkdir(parents=True)
    (vendored / "logger.go").write_text(VENDORED_ZAP)
    (tmp_path / "main.go").write_text(STRUCT_FIELD)

    program = load_program(tmp_path)
    assert program.package.path == "example.com/app"
    got = _normalize(_run(str(tmp_path)), f"{tmp_path}/")
    assert got == "main.go:11:2: call must use a string literal or a constant\n"


def test_vendored_zap_without_module(tmp_path):
    vendored = tmp_path / "vendor" / "go.uber.org" / "zap"
    vendored.mkdir(parents=True)
    (vendored / "logger.go").write_text(VENDORED_ZAP)
    pkg = tmp_path / "cmd" / "app"
    pkg.mkdir(parents=True)
    (pkg / "main.go").write_text(SPRINTF)

    got = _normalize(_run(str(pkg)), f"{pkg}/")
    assert got == "main.go:8:2: call must use a string literal or a constant\n"


def test_missing_directory(tmp_path):
    with pytest.raises(LoadError, match="cannot find package directory"):
        _run(str(tmp_path / "nope"))


def test_directory_without_go_files(tmp_path):
    (tmp_path / "README.md").write_text("# nothing")
    with pytest.raises(LoadError, match="no buildable Go source files in"):
        _run(str(tmp_path))


def test_syntax_error(tmp_path):
    (tmp_path / "main.go").write_text("package main\n\nfunc main() {\n\tx := \n}\n")
    with pytest.raises(LoadError, match=r"main\.go:\d+:\d+: syntax error"):
        _run(str(tmp_path))


def test_mixed_package_names(tmp_path):
    (tmp_path / "a.go").write_text("package a\n")
    (tmp_path / "b.go").write_text("package b\n")
    with pytest.raises(LoadError, match=r"found packages a \(a\.go\) and b \(b\.go\)"):
        _run(str(tmp_path))


def test_type_error_writes_nothing(tmp_path):
    (tmp_path / "a.go").write_text(SPRINTF)
    (tmp_path / "b.go").write_text("package main\n\nfunc broken() {\n\tundefinedCall()\n}\n")
    out = io.StringIO()
    with pytest.raises(TypeCheckError) as excinfo:
        analyze(out, str(tmp_path))
    assert out.getvalue() == ""
    assert str(excinfo.value) == f"{tmp_path}/b.go:4:2: undefined: undefinedCall"


def test_unknown_import_is_not_an_error(tmp_path):
    (tmp_path / "main.go").write_text(
        'package main\nimport (\n\t"github.com/acme/widgets"\n\t"go.uber.org/zap"\n)\n'
        "func main() {\n\tzap.L().Info(widgets.Message)\n}\n"
    )
    got = _normalize(_run(str(tmp_path)), f"{tmp_path}/")
    assert got == "main.go:7:2: call must use a string literal or a constant\n"


def test_build_constrained_file_is_skipped(tmp_path):
    (tmp_path / "main.go").write_text(STRING_CONSTANT)
    (tmp_path / "tool.go").write_text("//go:build ignore\n\n" + SPRINTF.replace("func main()", "func tool()"))
    assert _run(str(tmp_path)) == ""


def test_display_path_is_cleaned(tmp_path, monkeypatch):
    pkg = tmp_path / "pkg"
    pkg.mkdir()
    (pkg / "main.go").write_text(SPRINTF)
    monkeypatch.chdir(tmp_path)
    got = _run("./pkg/../pkg/")
    assert got.startswith("pkg/main.go:8:2: ")


def test_vendor_directory_is_found_from_subpackage(tmp_path: Path):
    (tmp_path / "go.mod").write_text("module example.com/app\n")
    vendored = tmp_path / "vendor" / "go.uber.org" / "zap"
    vendored.mkdir(parents=True)
    (vendored / "logger.go").write_text(VENDORED_ZAP)
    pkg = tmp_path / "internal" / "svc"
    pkg.mkdir(parents=True)
    (pkg / "svc.go").write_text(
        'package svc\nimport "go.uber.org/zap"\nfunc Run(l *zap.Logger, m string) {\n\tl.Info(m)\n}\n'
    )
    program = load_program(pkg)
    assert program.package.path == "example.com/app/internal/svc"
    got = _normalize(_run(str(pkg)), f"{pkg}/")
    assert got == "svc.go:4:2: call must use a string literal or a constant\n"


def test_logger_from_module_package_is_checked(tmp_path):
    (tmp_path / "go.mod").write_text("module example.com/app\n")
    lib = tmp_path / "internal" / "applog"
    lib.mkdir(parents=True)
    (lib / "applog.go").write_text(
        'package applog\n\nimport "go.uber.org/zap"\n\nfunc New() *zap.Logger { return zap.NewNop() }\n'
    )
    (tmp_path / "main.go").write_text(
        'package main\nimport "example.com/app/internal/applog"\n'
        'func main() {\n\tm := "x"\n\tapplog.New().Info(m)\n\tapplog.New().Info("ok")\n}\n'
    )
    got = _normalize(_run(str(tmp_path)), f"{tmp_path}/")
    assert got == "main.go:5:2: call must use a string literal or a constant\n"


def test_missing_module_package_aborts_the_run(tmp_path):
    (tmp_path / "go.mod").write_text("module example.com/app\n")
    (tmp_path / "main.go").write_text(
        'package main\nimport "example.com/app/missing"\nfunc main() {\n\tmissing.Run()\n}\n'
    )
    out = io.StringIO()
    with pytest.raises(TypeCheckError, match=r"main\.go:2:8: could not import example\.com/app/missing"):
        analyze(out, str(tmp_path))
    assert out.getvalue() == ""
