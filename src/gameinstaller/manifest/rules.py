"""
Platform rule evaluation.

Rules gate libraries and launch arguments on the OS, the architecture and
launcher feature flags. Evaluation is a pure function of the rule list and
the PlatformContext: no I/O, no shared state, safe to call from any thread.

Policy:
- No rules (None or empty) means ALLOW.
- Otherwise the decision starts at DISALLOW and every matching rule
  overwrites it with its own action. The last matching rule wins.
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from typing import TYPE_CHECKING

from pydantic import Field

from gameinstaller.manifest.base import ManifestModel

if TYPE_CHECKING:
    from collections.abc import Sequence

    from gameinstaller.platform_context import PlatformContext

logger = logging.getLogger(__name__)


class RuleAction(str, Enum):
    """Decision carried by a rule."""

    ALLOW = "allow"
    DISALLOW = "disallow"


class OsConstraint(ManifestModel):
    """
    OS part of a rule. Every present field must match.

    Attributes:
        name: Manifest OS name ("windows", "osx", "linux").
        version: Regular expression searched in the OS version string.
        arch: Manifest architecture name.
    """

    name: str | None = None
    version: str | None = None
    arch: str | None = None

    def matches(self, context: PlatformContext) -> bool:
        """Check this constraint against a platform context."""
        if self.name is not None and self.name != context.os_name:
            return False
        if self.arch is not None and self.arch != context.arch:
            return False
        if self.version is not None:
            try:
                if re.search(self.version, context.os_version) is None:
                    return False
            except re.error:
                logger.warning("Invalid OS version pattern in rule", extra={"pattern": self.version})
                return False
        return True


class Rule(ManifestModel):
    """Conditional allow/disallow directive."""

    action: RuleAction
    os: OsConstraint | None = None
    features: dict[str, bool] | None = Field(default=None)

    def matches(self, context: PlatformContext) -> bool:
        """A rule matches iff every present constraint is satisfied."""
        if self.os is not None and not self.os.matches(context):
            return False
        if self.features is not None:
            for name, expected in self.features.items():
                if context.feature(name) != expected:
                    return False
        return True


def evaluate_rules(
    rules: Sequence[Rule] | None,
    context: PlatformContext,
) -> RuleAction:
    """
    Evaluate a rule list for a platform.

    Args:
        rules: Rules in manifest order (None or empty means unrestricted).
        context: Platform to evaluate against.

    Returns:
        RuleAction.ALLOW or RuleAction.DISALLOW.
    """
    if not rules:
        return RuleAction.ALLOW

    decision = RuleAction.DISALLOW
    for rule in rules:
        if rule.matches(context):
            decision = rule.action
    return decision


def is_allowed(rules: Sequence[Rule] | None, context: PlatformContext) -> bool:
    """Convenience wrapper returning True when evaluate_rules() allows."""
    return evaluate_rules(rules, context) is RuleAction.ALLOW
