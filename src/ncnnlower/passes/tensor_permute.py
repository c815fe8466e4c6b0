"""Lower ``Tensor.permute`` (explicit axis order) to backend ``Permute``."""

__docformat__ = "restructuredtext"
__all__ = ["TensorPermutePass"]

import warnings
from collections.abc import Mapping

from ..graph import MissingParameterError, Operator, Parameter, ParameterTypeError, get_parameter
from ._registry import register_pass
from .base import NOOP_TYPE, GraphRewriterPass, LoweringOptions, RewriteOutcome
from .errors import PermuteLoweringError, RankFallbackWarning
from .permutation import IdentityPermute, lower_permutation, normalize_permute_dims, to_params


class TensorPermutePass(GraphRewriterPass):
    def match_pattern_graph(self) -> str:
        return """7767517
3 2
pnnx.Input              input       0 1 input
Tensor.permute          op_0        1 1 input out dims=%dims
pnnx.Output             output      1 0 out
"""

    def type_str(self) -> str:
        return "Permute"

    def name_str(self) -> str:
        return "permute"

    def write(
        self,
        op: Operator,
        captured_params: Mapping[str, Parameter],
        options: LoweringOptions,
    ) -> RewriteOutcome:
        source = op.inputs[0]
        try:
            dims = get_parameter(captured_params, "dims").ai
            if source.rank is None:
                warnings.warn(
                    f"{op.name}: input '{source.name}' has unknown rank, "
                    f"assuming rank {len(dims)} from dims",
                    RankFallbackWarning,
                    stacklevel=2,
                )
            perm = normalize_permute_dims(dims, source.rank, source.batch_index)
            result = lower_permutation(perm, explicit_axes=options.explicit_axes)
        except (PermuteLoweringError, ParameterTypeError, MissingParameterError) as error:
            self.warn(op, str(error))
            return RewriteOutcome.UNCHANGED

        if isinstance(result, IdentityPermute):
            op.type = NOOP_TYPE
            return RewriteOutcome.NOOP

        op.params = to_params(result)
        return RewriteOutcome.REWRITTEN


register_pass(TensorPermutePass, 20)
