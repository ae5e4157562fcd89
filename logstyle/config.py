from __future__ import annotations

"""
Analyzer configuration: which rules are enabled and how they are instantiated.

There is a single rule today, checking zap's severity methods. The rule
list is handed to the walker explicitly, so tests and embedders can run
any set of rules (including fakes) without touching global state.
"""

from dataclasses import dataclass, field
from typing import List, Sequence

from logstyle.matcher import ZAP_LOGGER, LoggerTarget
from logstyle.rules.base import Rule
from logstyle.rules.zap_logger import ZapLoggerRule


@dataclass
class Config:
    """
    Analyzer configuration.

    Carries the ordered list of enabled rules. Every rule sees every
    resolved call site; order only affects the order of diagnostics
    reported for the same call.
    """

    rules: Sequence[Rule] = field(default_factory=list)


def get_default_config(target: LoggerTarget = ZAP_LOGGER) -> Config:
    """
    Return the default configuration: the logging-message rule for target.

    This is what the CLI in main.py uses.
    """
    rules: List[Rule] = [
        ZapLoggerRule(target),
    ]
    return Config(rules=rules)


def get_enabled_rules(config: Config | None = None) -> Sequence[Rule]:
    """Return the list of enabled rules from the given config (or default config)."""
    if config is None:
        config = get_default_config()
    return config.rules
