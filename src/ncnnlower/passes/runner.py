"""Run lowering passes over a graph."""

__docformat__ = "restructuredtext"
__all__ = ["LoweringReport", "lower_graph"]

from dataclasses import dataclass, field

from ..graph import Graph, Operator
from ._registry import create_passes
from .base import GraphRewriterPass, LoweringOptions, RewriteOutcome


@dataclass
class LoweringReport:
    """Operator names touched by a lowering run.

    :param rewritten: Operators relabeled to a backend type (new names)
    :param noop: Operators marked as ``Noop``
    :param failed: Matched operators left unchanged after a diagnostic
    """

    rewritten: list[str] = field(default_factory=list)
    noop: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    def summary(self) -> str:
        return (
            f"{len(self.rewritten)} rewritten, "
            f"{len(self.noop)} noop, "
            f"{len(self.failed)} failed"
        )


def _rename(op: Operator, new_name: str) -> None:
    old_name = op.name
    op.name = new_name
    for tensor in op.outputs:
        tensor.producer = new_name
    for tensor in op.inputs:
        tensor.consumers = [new_name if c == old_name else c for c in tensor.consumers]


def _run_pass(
    graph: Graph,
    rewriter: GraphRewriterPass,
    options: LoweringOptions,
    report: LoweringReport,
) -> None:
    counter = 0
    taken = {op.name for op in graph.operators}
    for op in list(graph.operators):
        captured = rewriter.match(op)
        if captured is None:
            continue

        outcome = rewriter.write(op, captured, options)
        if outcome is RewriteOutcome.REWRITTEN:
            op.type = rewriter.type_str()
            # Skip indices already used by other operators or by earlier runs
            while f"{rewriter.name_str()}_{counter}" in taken:
                counter += 1
            taken.discard(op.name)
            _rename(op, f"{rewriter.name_str()}_{counter}")
            taken.add(op.name)
            counter += 1
            report.rewritten.append(op.name)
        elif outcome is RewriteOutcome.NOOP:
            report.noop.append(op.name)
        else:
            report.failed.append(op.name)


def lower_graph(
    graph: Graph,
    passes: list[GraphRewriterPass] | None = None,
    options: LoweringOptions | None = None,
) -> LoweringReport:
    """Lower a graph in place.

    Each pass visits every operator once; ``write`` runs once per match.

    :param graph: Graph to rewrite
    :param passes: Passes in execution order (None = all registered passes)
    :param options: Lowering options (None = defaults)
    :return: Report of rewritten, no-op and failed operators
    """
    if passes is None:
        passes = create_passes()
    if options is None:
        options = LoweringOptions()

    report = LoweringReport()
    for rewriter in passes:
        _run_pass(graph, rewriter, options, report)
    return report
