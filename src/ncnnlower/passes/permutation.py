"""Permutation normalization and backend enumeration mapping.

Two source descriptions are normalized into one backend-facing permutation:

- an explicit axis order (``Tensor.permute dims=...``)
- a two-axis swap (``torch.transpose dim0=... dim1=...``)

The implicit batch axis is stripped first, then the permutation is validated
and mapped to the backend ``Permute`` order type. The backend supports every
permutation up to rank 4, but only identity and single pairwise swaps at
rank 5.

All functions here are pure and raise :class:`PermuteLoweringError`
subclasses on failure.
"""

__docformat__ = "restructuredtext"
__all__ = [
    "EXPLICIT_ORDER_TYPE",
    "MAX_RANK",
    "PERMUTE_TYPE_TABLES",
    "EnumCode",
    "ExplicitAxes",
    "IdentityPermute",
    "PermuteLowering",
    "decode_permute_type",
    "get_permute_type",
    "is_identity",
    "lower_permutation",
    "normalize_permute_dims",
    "normalize_transpose_dims",
    "to_params",
]

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from itertools import combinations
from types import MappingProxyType

from ..graph import Parameter
from .errors import (
    BatchAxisConflictError,
    InvalidPermutationError,
    RankMismatchError,
    UnknownRankError,
    UnknownRankNegativeIndexError,
    UnmappablePermutationError,
    UnsupportedRankError,
)

MAX_RANK = 5

# Sentinel order type announcing per-axis parameters "1".."R"
EXPLICIT_ORDER_TYPE = -1

_PERMUTE_TYPE_1D = {
    (0,): 0,
}

_PERMUTE_TYPE_2D = {
    (0, 1): 0,
    (1, 0): 1,
}

_PERMUTE_TYPE_3D = {
    (0, 1, 2): 0,
    (0, 2, 1): 1,
    (1, 0, 2): 2,
    (1, 2, 0): 3,
    (2, 0, 1): 4,
    (2, 1, 0): 5,
}

# Backend order types for rank 4; the numbering is part of the backend format
_PERMUTE_TYPE_4D = {
    (0, 1, 2, 3): 0,
    (0, 1, 3, 2): 1,
    (0, 2, 1, 3): 2,
    (0, 2, 3, 1): 3,
    (0, 3, 1, 2): 4,
    (0, 3, 2, 1): 5,
    (1, 0, 2, 3): 6,
    (1, 0, 3, 2): 7,
    (1, 2, 0, 3): 8,
    (1, 2, 3, 0): 9,
    (1, 3, 0, 2): 10,
    (1, 3, 2, 0): 11,
    (2, 0, 1, 3): 12,
    (2, 0, 3, 1): 13,
    (2, 1, 0, 3): 14,
    (2, 1, 3, 0): 15,
    (2, 3, 0, 1): 16,
    (2, 3, 1, 0): 17,
    (3, 0, 1, 2): 18,
    (3, 0, 2, 1): 19,
    (3, 1, 0, 2): 20,
    (3, 1, 2, 0): 21,
    (3, 2, 0, 1): 22,
    (3, 2, 1, 0): 23,
}


def _build_5d_permute_types() -> dict[tuple[int, ...], int]:
    """Identity, then every single pairwise swap with i < j in lexicographic order."""
    identity = tuple(range(5))
    table = {identity: 0}
    for code, (i, j) in enumerate(combinations(range(5), 2), start=1):
        perm = list(identity)
        perm[i], perm[j] = perm[j], perm[i]
        table[tuple(perm)] = code
    return table


PERMUTE_TYPE_TABLES: Mapping[int, Mapping[tuple[int, ...], int]] = MappingProxyType(
    {
        1: MappingProxyType(_PERMUTE_TYPE_1D),
        2: MappingProxyType(_PERMUTE_TYPE_2D),
        3: MappingProxyType(_PERMUTE_TYPE_3D),
        4: MappingProxyType(_PERMUTE_TYPE_4D),
        5: MappingProxyType(_build_5d_permute_types()),
    }
)

_PERMUTE_TYPE_DECODE: Mapping[int, Mapping[int, tuple[int, ...]]] = MappingProxyType(
    {
        rank: MappingProxyType({code: perm for perm, code in table.items()})
        for rank, table in PERMUTE_TYPE_TABLES.items()
    }
)


@dataclass(frozen=True)
class IdentityPermute:
    """The permutation is a no-op; the operator becomes ``Noop``."""


@dataclass(frozen=True)
class EnumCode:
    """Backend order type for a supported permutation."""

    code: int


@dataclass(frozen=True)
class ExplicitAxes:
    """Explicit per-axis source indices, one per output axis."""

    axes: tuple[int, ...]


PermuteLowering = IdentityPermute | EnumCode | ExplicitAxes


def _check_rank(rank: int) -> None:
    if rank > MAX_RANK:
        raise UnsupportedRankError(
            f"permute of {rank}-rank tensor is not supported (max rank {MAX_RANK})"
        )


def _check_bijection(perm: Sequence[int], rank: int) -> None:
    if sorted(perm) != list(range(rank)):
        raise InvalidPermutationError(
            f"{list(perm)} is not a permutation of {list(range(rank))}"
        )


def is_identity(perm: Sequence[int]) -> bool:
    return all(axis == i for i, axis in enumerate(perm))


def normalize_permute_dims(
    dims: Sequence[int], rank: int | None, batch_index: int | None
) -> tuple[int, ...]:
    """Normalize an explicit axis order into a backend permutation.

    When the declared rank is unknown, ``len(dims)`` is used instead. That is
    a heuristic: it is wrong whenever the producing tensor's real rank differs
    from the list length.

    :param dims: Source axis order, one entry per input axis (negative entries
        count from the end)
    :param rank: Declared input rank, or None when the shape is unknown
    :param batch_index: Implicit batch axis of the input, or None
    :return: Permutation over the non-batch axes
    :raises UnsupportedRankError: If the reduced rank exceeds 5
    :raises RankMismatchError: If the reduced list length differs from the reduced rank
    :raises InvalidPermutationError: If the result is not a bijection
    """
    input_rank = rank if rank is not None else len(dims)
    resolved = [d + input_rank if d < 0 else d for d in dims]

    if batch_index is not None and 0 <= batch_index < input_rank:
        resolved = [d - 1 if d > batch_index else d for d in resolved if d != batch_index]
        input_rank -= 1

    _check_rank(input_rank)

    if len(resolved) != input_rank:
        raise RankMismatchError(
            f"permute {input_rank}-rank tensor with {len(resolved)}-rank dims is not possible"
        )

    _check_bijection(resolved, input_rank)
    return tuple(resolved)


def normalize_transpose_dims(
    dim0: int, dim1: int, rank: int | None, batch_index: int | None
) -> tuple[int, ...]:
    """Normalize a two-axis swap into a backend permutation.

    :param dim0: First swapped axis (negative counts from the end)
    :param dim1: Second swapped axis (negative counts from the end)
    :param rank: Declared input rank, or None when the shape is unknown
    :param batch_index: Implicit batch axis of the input, or None
    :return: Permutation over the non-batch axes
    :raises UnknownRankNegativeIndexError: If the rank is unknown and an axis is negative
    :raises UnknownRankError: If the rank is unknown
    :raises InvalidPermutationError: If an axis is out of range
    :raises BatchAxisConflictError: If the swap touches the batch axis
    :raises UnsupportedRankError: If the reduced rank exceeds 5
    """
    if rank is None:
        if dim0 < 0 or dim1 < 0:
            raise UnknownRankNegativeIndexError(
                f"cannot resolve negative axis in swap ({dim0}, {dim1}) without input rank"
            )
        raise UnknownRankError(f"cannot build swap ({dim0}, {dim1}) without input rank")

    if dim0 < 0:
        dim0 += rank
    if dim1 < 0:
        dim1 += rank

    if not (0 <= dim0 < rank and 0 <= dim1 < rank):
        raise InvalidPermutationError(f"swap ({dim0}, {dim1}) is out of range for rank {rank}")

    input_rank = rank
    if batch_index is not None and 0 <= batch_index < input_rank:
        if batch_index in (dim0, dim1):
            raise BatchAxisConflictError(
                f"swap ({dim0}, {dim1}) moves the batch axis {batch_index}"
            )
        if dim0 > batch_index:
            dim0 -= 1
        if dim1 > batch_index:
            dim1 -= 1
        input_rank -= 1

    _check_rank(input_rank)

    perm = list(range(input_rank))
    perm[dim0], perm[dim1] = perm[dim1], perm[dim0]

    _check_bijection(perm, input_rank)
    return tuple(perm)


def get_permute_type(perm: Sequence[int]) -> int:
    """Map a permutation to the backend order type.

    :param perm: Validated permutation
    :return: Order type code
    :raises UnsupportedRankError: If the rank is outside 1..5
    :raises UnmappablePermutationError: If the backend cannot express the permutation
    """
    rank = len(perm)
    table = PERMUTE_TYPE_TABLES.get(rank)
    if table is None:
        raise UnsupportedRankError(f"no order types for {rank}-rank permute")
    code = table.get(tuple(perm))
    if code is None:
        raise UnmappablePermutationError(
            f"unsupported {rank}-rank permutation {' '.join(str(a) for a in perm)}"
        )
    return code


def decode_permute_type(rank: int, code: int) -> tuple[int, ...]:
    """Map a backend order type back to its permutation.

    :param rank: Permutation rank
    :param code: Order type code
    :return: Permutation
    :raises ValueError: If the rank has no such order type
    """
    table = _PERMUTE_TYPE_DECODE.get(rank)
    if table is None or code not in table:
        raise ValueError(f"Unknown order type {code} for rank {rank}")
    return table[code]


def lower_permutation(perm: Sequence[int], explicit_axes: bool = False) -> PermuteLowering:
    """Choose the backend form for a validated permutation.

    :param perm: Validated permutation
    :param explicit_axes: Emit explicit per-axis indices instead of an order type
    :return: Identity, order type, or explicit axes
    :raises UnmappablePermutationError: If no order type exists for the permutation
    """
    if is_identity(perm):
        return IdentityPermute()
    if explicit_axes:
        return ExplicitAxes(tuple(perm))
    return EnumCode(get_permute_type(perm))


def to_params(result: PermuteLowering) -> dict[str, Parameter]:
    """Encode a lowering result as ``Permute`` parameters.

    ``"0"`` holds the order type; explicit axes use the -1 sentinel followed by
    keys ``"1".."R"``.
    """
    if isinstance(result, EnumCode):
        return {"0": Parameter.from_value(result.code)}
    if isinstance(result, ExplicitAxes):
        params = {"0": Parameter.from_value(EXPLICIT_ORDER_TYPE)}
        for i, axis in enumerate(result.axes, start=1):
            params[str(i)] = Parameter.from_value(axis)
        return params
    return {}
