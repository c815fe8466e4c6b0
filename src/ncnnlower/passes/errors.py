"""Permutation lowering errors and diagnostics.

Pure normalization functions raise these errors. Passes catch them, emit a
:class:`LoweringWarning` and leave the operator unchanged.
"""

__docformat__ = "restructuredtext"
__all__ = [
    "BatchAxisConflictError",
    "InvalidPermutationError",
    "LoweringWarning",
    "PermuteLoweringError",
    "RankFallbackWarning",
    "RankMismatchError",
    "UnknownRankError",
    "UnknownRankNegativeIndexError",
    "UnmappablePermutationError",
    "UnsupportedRankError",
]


class LoweringWarning(UserWarning):
    """Diagnostic for an operator a pass could not lower."""


class RankFallbackWarning(LoweringWarning):
    """Rank was inferred from the permutation length, not the declared shape."""


class PermuteLoweringError(ValueError):
    """Base class for permutation lowering failures."""

    kind = "PermuteLoweringError"

    def __str__(self) -> str:
        return f"{self.kind}: {super().__str__()}"


class UnsupportedRankError(PermuteLoweringError):
    kind = "UnsupportedRank"


class RankMismatchError(PermuteLoweringError):
    kind = "RankMismatch"


class InvalidPermutationError(PermuteLoweringError):
    kind = "InvalidPermutation"


class BatchAxisConflictError(PermuteLoweringError):
    kind = "BatchAxisConflict"


class UnmappablePermutationError(PermuteLoweringError):
    kind = "UnmappablePermutation"


class UnknownRankError(PermuteLoweringError):
    kind = "UnknownRank"


class UnknownRankNegativeIndexError(UnknownRankError):
    kind = "UnknownRankNegativeIndex"
