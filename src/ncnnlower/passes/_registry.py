"""Pass registry for graph lowering.

Passes register with an integer priority; lower priorities run first and
equal priorities keep registration order.
"""

__docformat__ = "restructuredtext"
__all__ = [
    "PASSES",
    "create_passes",
    "get_registered_passes",
    "register_pass",
]

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .base import GraphRewriterPass

# Global pass registry: (priority, pass class)
PASSES: list[tuple[int, type["GraphRewriterPass"]]] = []


def register_pass(pass_cls: type["GraphRewriterPass"], priority: int) -> None:
    """Register a pass class.

    :param pass_cls: GraphRewriterPass subclass
    :param priority: Execution priority (lower runs first)
    """
    if any(registered is pass_cls for _, registered in PASSES):
        return
    PASSES.append((priority, pass_cls))


def get_registered_passes() -> list[tuple[int, type["GraphRewriterPass"]]]:
    """Get registered passes in execution order.

    :return: (priority, pass class) pairs sorted by priority
    """
    return sorted(PASSES, key=lambda entry: entry[0])


def create_passes() -> list["GraphRewriterPass"]:
    """Instantiate registered passes in execution order."""
    return [pass_cls() for _, pass_cls in get_registered_passes()]
