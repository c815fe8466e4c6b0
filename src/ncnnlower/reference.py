"""Reference execution of lowered permutation operators.

Applies a lowered ``Permute`` or ``Noop`` operator to a torch tensor the way
the backend would. The batch axis stays in place and the order type (or the
explicit axes) reorders the remaining axes.
"""

__docformat__ = "restructuredtext"
__all__ = ["backend_permutation", "run_permute"]

import numpy as np
import torch

from ncnnlower.graph import Operator
from ncnnlower.passes import NOOP_TYPE, decode_permute_type
from ncnnlower.passes.permutation import EXPLICIT_ORDER_TYPE


def backend_permutation(op: Operator, rank: int) -> tuple[int, ...]:
    """Full-rank permutation a lowered operator applies to its input.

    :param op: Lowered ``Permute`` or ``Noop`` operator
    :param rank: Rank of the runtime input, batch axis included
    :return: Permutation over all input axes
    :raises ValueError: If the operator is not a lowered permutation
    """
    if op.type == NOOP_TYPE:
        return tuple(range(rank))
    if op.type != "Permute":
        raise ValueError(f"Operator '{op.name}' of type {op.type} is not a lowered permute")

    batch_index = op.inputs[0].batch_index if op.inputs else None
    if batch_index is not None and not 0 <= batch_index < rank:
        batch_index = None
    axes = [axis for axis in range(rank) if axis != batch_index]

    order_type = op.params["0"].i
    if order_type == EXPLICIT_ORDER_TYPE:
        perm = tuple(op.params[str(i)].i for i in range(1, len(axes) + 1))
    else:
        perm = decode_permute_type(len(axes), order_type)

    # Non-batch output positions take the non-batch input axes in backend order
    full = list(range(rank))
    for position, source in zip(axes, perm, strict=True):
        full[position] = axes[source]
    return tuple(full)


def run_permute(op: Operator, x: torch.Tensor | np.ndarray) -> torch.Tensor | np.ndarray:
    """Apply a lowered permutation operator to a tensor or array.

    :param op: Lowered ``Permute`` or ``Noop`` operator
    :param x: Input tensor or numpy array, batch axis included
    :return: Permuted tensor, same type as the input
    """
    if isinstance(x, np.ndarray):
        return np.transpose(x, backend_permutation(op, x.ndim))
    return x.permute(*backend_permutation(op, x.dim()))
