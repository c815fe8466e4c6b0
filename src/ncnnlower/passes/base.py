"""Graph rewriter pass contract and single-node pattern matching."""

__docformat__ = "restructuredtext"
__all__ = [
    "NOOP_TYPE",
    "GraphRewriterPass",
    "LoweringOptions",
    "RewriteOutcome",
    "match_operator",
]

import warnings
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from functools import cached_property
from types import MappingProxyType

from ..graph import Operator, Parameter, PatternGraph, PatternNode, Placeholder, parse_pattern_text
from .errors import LoweringWarning

# Operator type consumed by identity elimination
NOOP_TYPE = "Noop"


@dataclass(frozen=True)
class LoweringOptions:
    """Options shared by all passes of one lowering run.

    :param explicit_axes: Write explicit per-axis indices for explicit axis
        orders instead of looking up an order type
    """

    explicit_axes: bool = False


class RewriteOutcome(Enum):
    """Result of one rewrite.

    :cvar REWRITTEN: Parameters written; the runner relabels the operator
    :cvar NOOP: Operator marked as ``Noop``
    :cvar UNCHANGED: Operator left untouched after a diagnostic
    """

    REWRITTEN = "rewritten"
    NOOP = "noop"
    UNCHANGED = "unchanged"


def match_operator(pattern: PatternNode, op: Operator) -> Mapping[str, Parameter] | None:
    """Match one operator against a template node.

    Type, input/output arity and parameter keys must agree exactly. Literal
    template values must equal the operator's; placeholders capture the
    operator's value, and a placeholder used twice must capture equal values.

    :param pattern: Interior template node
    :param op: Candidate operator
    :return: Read-only captured parameters, or None if the operator does not match
    """
    if op.type != pattern.type:
        return None
    if len(op.inputs) != len(pattern.inputs) or len(op.outputs) != len(pattern.outputs):
        return None
    if set(op.params) != set(pattern.params):
        return None

    captured: dict[str, Parameter] = {}
    for key, expected in pattern.params.items():
        value = op.params[key]
        if isinstance(expected, Placeholder):
            bound = captured.setdefault(expected.name, value)
            if bound != value:
                return None
        elif expected != value:
            return None
    return MappingProxyType(captured)


class GraphRewriterPass(ABC):
    """Base class for lowering passes.

    A pass declares a template with one interior operator, the backend type and
    name used to relabel a rewritten operator, and a :meth:`write` hook called
    once per match. ``write`` never raises for lowering failures; it warns and
    returns :attr:`RewriteOutcome.UNCHANGED`.
    """

    @abstractmethod
    def match_pattern_graph(self) -> str:
        """Template text."""

    @abstractmethod
    def type_str(self) -> str:
        """Backend operator type for rewritten operators."""

    @abstractmethod
    def name_str(self) -> str:
        """Name prefix for rewritten operators."""

    @abstractmethod
    def write(
        self,
        op: Operator,
        captured_params: Mapping[str, Parameter],
        options: LoweringOptions,
    ) -> RewriteOutcome:
        """Rewrite one matched operator."""

    @cached_property
    def pattern(self) -> PatternGraph:
        return parse_pattern_text(self.match_pattern_graph())

    def match(self, op: Operator) -> Mapping[str, Parameter] | None:
        return match_operator(self.pattern.interior, op)

    @staticmethod
    def warn(op: Operator, message: str) -> None:
        """Emit a diagnostic for an operator left unrewritten."""
        warnings.warn(f"{op.name}: {message}", LoweringWarning, stacklevel=3)
