"""Stage 3: Lowering Passes.

Pattern-matching passes that rewrite imported operators into backend
operators. Importing this module registers the built-in passes.
"""

__docformat__ = "restructuredtext"
__all__ = [
    "NOOP_TYPE",
    "PASSES",
    "BatchAxisConflictError",
    "EnumCode",
    "ExplicitAxes",
    "GraphRewriterPass",
    "IdentityPermute",
    "InvalidPermutationError",
    "LoweringOptions",
    "LoweringReport",
    "LoweringWarning",
    "PermuteLoweringError",
    "RankFallbackWarning",
    "RankMismatchError",
    "RewriteOutcome",
    "TensorPermutePass",
    "TorchTransposePass",
    "UnknownRankError",
    "UnknownRankNegativeIndexError",
    "UnmappablePermutationError",
    "UnsupportedRankError",
    "create_passes",
    "decode_permute_type",
    "get_permute_type",
    "get_registered_passes",
    "lower_graph",
    "lower_permutation",
    "match_operator",
    "normalize_permute_dims",
    "normalize_transpose_dims",
    "register_pass",
]

from ncnnlower.passes._registry import (
    PASSES,
    create_passes,
    get_registered_passes,
    register_pass,
)
from ncnnlower.passes.base import (
    NOOP_TYPE,
    GraphRewriterPass,
    LoweringOptions,
    RewriteOutcome,
    match_operator,
)
from ncnnlower.passes.errors import (
    BatchAxisConflictError,
    InvalidPermutationError,
    LoweringWarning,
    PermuteLoweringError,
    RankFallbackWarning,
    RankMismatchError,
    UnknownRankError,
    UnknownRankNegativeIndexError,
    UnmappablePermutationError,
    UnsupportedRankError,
)
from ncnnlower.passes.permutation import (
    EnumCode,
    ExplicitAxes,
    IdentityPermute,
    decode_permute_type,
    get_permute_type,
    lower_permutation,
    normalize_permute_dims,
    normalize_transpose_dims,
)
from ncnnlower.passes.runner import LoweringReport, lower_graph
from ncnnlower.passes.tensor_permute import TensorPermutePass
from ncnnlower.passes.torch_transpose import TorchTransposePass
