"""Lower ``torch.transpose`` (two-axis swap) to backend ``Permute``."""

__docformat__ = "restructuredtext"
__all__ = ["TorchTransposePass"]

from collections.abc import Mapping

from ..graph import MissingParameterError, Operator, Parameter, ParameterTypeError, get_parameter
from ._registry import register_pass
from .base import NOOP_TYPE, GraphRewriterPass, LoweringOptions, RewriteOutcome
from .errors import PermuteLoweringError
from .permutation import IdentityPermute, lower_permutation, normalize_transpose_dims, to_params


class TorchTransposePass(GraphRewriterPass):
    """Swap of two axes; always written as an order type."""

    def match_pattern_graph(self) -> str:
        return """7767517
3 2
pnnx.Input              input       0 1 input
torch.transpose         op_0        1 1 input out dim0=%dim0 dim1=%dim1
pnnx.Output             output      1 0 out
"""

    def type_str(self) -> str:
        return "Permute"

    def name_str(self) -> str:
        return "transpose"

    def write(
        self,
        op: Operator,
        captured_params: Mapping[str, Parameter],
        options: LoweringOptions,
    ) -> RewriteOutcome:
        source = op.inputs[0]
        try:
            dim0 = get_parameter(captured_params, "dim0").i
            dim1 = get_parameter(captured_params, "dim1").i
            perm = normalize_transpose_dims(dim0, dim1, source.rank, source.batch_index)
            result = lower_permutation(perm)
        except (PermuteLoweringError, ParameterTypeError, MissingParameterError) as error:
            self.warn(op, str(error))
            return RewriteOutcome.UNCHANGED

        if isinstance(result, IdentityPermute):
            op.type = NOOP_TYPE
            return RewriteOutcome.NOOP

        op.params = to_params(result)
        return RewriteOutcome.REWRITTEN


register_pass(TorchTransposePass, 20)
