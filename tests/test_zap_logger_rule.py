"""Unit tests for the zap logger message rule."""

from pathlib import Path

import pytest

from logstyle.analyzer import iter_diagnostics, load_program
from logstyle.config import Config
from logstyle.matcher import LoggerTarget
from logstyle.rules.zap_logger import MESSAGE, ZapLoggerRule


def _run_rule(tmp_path: Path, body: str, rule: ZapLoggerRule | None = None, prelude: str = "") -> list:
    """Wrap body in a main() with a zap logger in scope, run the rule, return diagnostics."""
    source = f"""package main

import (
	"fmt"
	"strings"

	"go.uber.org/zap"
)

var _ = fmt.Sprint
var _ = strings.ToUpper
{prelude}
func main() {{
	logger := zap.NewNop()
{body}
}}
"""
    (tmp_path / "main.go").write_text(source)
    program = load_program(tmp_path)
    config = Config(rules=[rule or ZapLoggerRule()])
    return list(iter_diagnostics(program, config))


@pytest.mark.parametrize(
    "call",
    [
        'logger.Info("Hello, World!")',
        "logger.Info(`raw string`)",
        'logger.Debug("x", zap.String("k", "v"))',
        'logger.Warn("")',
        'logger.Error("failed", zap.Error(nil))',
        "logger.Info(42)",
        "logger.Info('x')",
    ],
)
def test_literal_messages_are_compliant(tmp_path, call):
    assert _run_rule(tmp_path, "\t" + call) == []


def test_local_constant_is_compliant(tmp_path):
    body = '\tconst msg = "starting"\n\tlogger.Info(msg)'
    assert _run_rule(tmp_path, body) == []


def test_package_constant_is_compliant(tmp_path):
    prelude = 'const startMsg = "starting"\n'
    assert _run_rule(tmp_path, "\tlogger.Info(startMsg)", prelude=prelude) == []


def test_constant_declared_after_use_is_compliant(tmp_path):
    prelude = "\nfunc later(l *zap.Logger) { l.Warn(laterMsg) }\n\nconst laterMsg = \"later\"\n"
    assert _run_rule(tmp_path, "\tlater(logger)", prelude=prelude) == []


def test_sprintf_message_is_reported(tmp_path):
    diagnostics = _run_rule(tmp_path, '\tlogger.Info(fmt.Sprintf("Hello, %s!", "World"))')
    assert len(diagnostics) == 1
    d = diagnostics[0]
    assert d.rule_id == "zap-logger-message"
    assert d.message == MESSAGE
    assert d.location.column == 2
    assert d.location.snippet.startswith("logger.Info(fmt.Sprintf")


def test_variable_message_is_reported(tmp_path):
    body = '\tmsg := "Hello"\n\tlogger.Info(msg)'
    assert [d.message for d in _run_rule(tmp_path, body)] == [MESSAGE]


def test_shadowed_constant_is_reported(tmp_path):
    prelude = 'const msg = "constant"\n'
    body = '\tmsg := "variable"\n\tlogger.Info(msg)'
    assert [d.message for d in _run_rule(tmp_path, body, prelude=prelude)] == [MESSAGE]


@pytest.mark.parametrize(
    "call",
    [
        'logger.Info("a" + "b")',
        'logger.Debug(strings.ToUpper("x"))',
        'logger.Warn(("parenthesized"))',
        "logger.Error(zap.NewNop().Name())",
        'logger.Info(fmt.Sprint("x"))',
    ],
)
def test_other_expression_shapes_are_reported(tmp_path, call):
    assert [d.message for d in _run_rule(tmp_path, "\t" + call)] == [MESSAGE]


def test_all_four_severity_methods_are_checked(tmp_path):
    body = "\tm := \"x\"\n\tlogger.Debug(m)\n\tlogger.Info(m)\n\tlogger.Warn(m)\n\tlogger.Error(m)"
    assert len(_run_rule(tmp_path, body)) == 4


def test_other_logger_methods_are_ignored(tmp_path):
    body = "\tm := \"x\"\n\tlogger.Fatal(m)\n\tlogger.Panic(m)\n\t_ = logger.Named(m)"
    assert _run_rule(tmp_path, body) == []


def test_sugared_logger_is_ignored(tmp_path):
    body = "\tm := \"x\"\n\tlogger.Sugar().Info(m)"
    assert _run_rule(tmp_path, body) == []


def test_receiver_from_function_call_is_checked(tmp_path):
    body = "\tm := \"x\"\n\tzap.L().Info(m)\n\tlogger.With(zap.Int(\"n\", 1)).Warn(m)"
    diagnostics = _run_rule(tmp_path, body)
    assert [d.location.line for d in diagnostics] == [16, 17]


def test_free_function_named_like_a_method_is_ignored(tmp_path):
    prelude = "\nfunc Info(msg string) {}\n"
    body = "\tm := \"x\"\n\tInfo(m)"
    assert _run_rule(tmp_path, body, prelude=prelude) == []


def test_custom_type_with_same_method_names_is_ignored(tmp_path):
    prelude = "\ntype Logger struct{}\n\nfunc (l *Logger) Info(msg string) {}\n"
    body = "\tm := \"x\"\n\tmine := &Logger{}\n\tmine.Info(m)\n\tmine.Info(fmt.Sprintf(\"%d\", 1))"
    assert _run_rule(tmp_path, body, prelude=prelude) == []


def test_call_without_arguments_is_compliant(tmp_path):
    prelude = "\ntype Quiet struct{}\n\nfunc (Quiet) Info() {}\n"
    rule = ZapLoggerRule(LoggerTarget("example.com/app", "Quiet", frozenset({"Info"})))
    (tmp_path / "go.mod").write_text("module example.com/app\n")
    assert _run_rule(tmp_path, "\tq := Quiet{}\n\tq.Info()", rule=rule, prelude=prelude) == []


def test_custom_target(tmp_path):
    prelude = "\ntype Quiet struct{}\n\nfunc (Quiet) Info(msg string) {}\n"
    rule = ZapLoggerRule(LoggerTarget("example.com/app", "Quiet", frozenset({"Info"})))
    (tmp_path / "go.mod").write_text("module example.com/app\n")
    body = "\tm := \"x\"\n\tq := Quiet{}\n\tq.Info(m)\n\tlogger.Info(m)"
    diagnostics = _run_rule(tmp_path, body, rule=rule, prelude=prelude)
    assert [d.location.snippet for d in diagnostics] == ["q.Info(m)"]


def test_call_through_interface_is_not_reported(tmp_path):
    prelude = "\ntype Lg interface {\n\tInfo(msg string, fields ...zap.Field)\n}\n"
    body = "\tm := \"x\"\n\tvar l Lg = logger\n\tl.Info(m)\n\tl.Info(fmt.Sprintf(\"%d\", 1))"
    assert _run_rule(tmp_path, body, prelude=prelude) == []
