"""End-to-end tests for the NcnnLower facade and reference execution.

Test Coverage:
- TestLowerOnnx: ONNX file -> lowered graph, verbose report, failures
- TestLowerText: text IR -> lowered graph, assumed batch axis
- TestReferenceExecution: lowered operators reproduce torch/numpy permutes
"""

from itertools import combinations, permutations

import numpy as np
import onnx
import pytest
import torch

from ncnnlower import NcnnLower
from ncnnlower.graph import Operator
from ncnnlower.passes import NOOP_TYPE, LoweringWarning, lower_graph
from ncnnlower.passes.permutation import PERMUTE_TYPE_TABLES
from ncnnlower.reference import backend_permutation, run_permute

SMALL_RANK_PERMS = [perm for rank in range(1, 5) for perm in permutations(range(rank))]
RANK5_PERMS = sorted(PERMUTE_TYPE_TABLES[5])
BATCH_FIXED_RANK5_PERMS = [perm for perm in permutations(range(5)) if perm[0] == 0]


def _sample(rank):
    shape = tuple(range(2, 2 + rank))
    return torch.arange(int(np.prod(shape)), dtype=torch.float32).reshape(shape)


class TestLowerOnnx:
    """Test lowering ONNX models."""

    def test_batch_axis_is_stripped(self, relu_transpose_model):
        graph = NcnnLower().lower_onnx(relu_transpose_model)

        assert [op.type for op in graph.operators] == [
            "pnnx.Input",
            "Relu",
            "Permute",
            "Relu",
            "pnnx.Output",
        ]
        op = graph.find_operator("permute_0")
        assert op.params["0"].i == 3
        assert op.inputs[0].batch_index == 0

        x = torch.randn(2, 3, 4, 5)
        assert torch.equal(run_permute(op, x), x.permute(0, 2, 3, 1))

    def test_identity_becomes_noop(self, transpose_model_path):
        graph = NcnnLower().lower_onnx(transpose_model_path([2, 3, 4], [0, 1, 2]))
        op = graph.operators[1]
        assert op.type == NOOP_TYPE
        assert op.name == "transpose"
        assert op.params == {}

    def test_verbose_prints_report(self, relu_transpose_model, capsys):
        NcnnLower(verbose=True).lower_onnx(relu_transpose_model)
        captured = capsys.readouterr()
        assert "Lowered: 1 rewritten, 0 noop, 0 failed" in captured.out

    def test_unmappable_permutation_is_kept(self, transpose_model_path, capsys):
        path = transpose_model_path([2, 3, 4, 5, 6], [1, 2, 0, 3, 4])
        with pytest.warns(LoweringWarning, match="transpose: UnmappablePermutation"):
            graph = NcnnLower(verbose=True).lower_onnx(path)

        op = graph.operators[1]
        assert op.type == "Tensor.permute"
        assert op.params["dims"].ai == (1, 2, 0, 3, 4)
        assert "Not lowered: transpose" in capsys.readouterr().out

    def test_explicit_axes_lowers_any_permutation(self, transpose_model_path):
        path = transpose_model_path([2, 3, 4, 5, 6], [1, 2, 0, 3, 4])
        graph = NcnnLower(explicit_axes=True).lower_onnx(path)

        op = graph.find_operator("permute_0")
        assert {k: v.i for k, v in op.params.items()} == {
            "0": -1,
            "1": 1,
            "2": 2,
            "3": 0,
            "4": 3,
            "5": 4,
        }
        x = _sample(5)
        assert torch.equal(run_permute(op, x), x.permute(1, 2, 0, 3, 4))

    def test_assume_batch_dim(self, transpose_model_path):
        path = transpose_model_path([1, 3, 4, 5], [0, 3, 1, 2])
        graph = NcnnLower(assume_batch_dim=True).lower_onnx(path)
        # (0,3,1,2) without the batch axis is (2,0,1)
        assert graph.find_operator("permute_0").params["0"].i == 4

    def test_preprocess(self, transpose_model_path):
        model = NcnnLower(target_opset=18).preprocess(transpose_model_path([2, 3], [1, 0]))
        assert isinstance(model, onnx.ModelProto)
        assert model.opset_import[0].version == 18


class TestLowerText:
    """Test lowering text IR graphs."""

    GRAPH = """7767517
4 3
pnnx.Input              input       0 1 in0 #in0=(1,3,4,5)f32
Tensor.permute          op_0        1 1 in0 a dims=(0,2,3,1) #a=(1,4,5,3)f32
torch.transpose         op_1        1 1 a b dim0=1 dim1=3 #b=(1,3,5,4)f32
pnnx.Output             output      1 0 b
"""

    def test_lower_text(self):
        graph = NcnnLower().lower_text(self.GRAPH)
        assert [(op.type, op.name) for op in graph.operators] == [
            ("pnnx.Input", "input"),
            ("Permute", "permute_0"),
            ("Permute", "transpose_0"),
            ("pnnx.Output", "output"),
        ]
        assert graph.find_operator("permute_0").params["0"].i == 3
        # swap (1, 3) at rank 4 is (0,3,2,1)
        assert graph.find_operator("transpose_0").params["0"].i == 5

    def test_lower_text_with_batch_axis(self):
        graph = NcnnLower(assume_batch_dim=True).lower_text(self.GRAPH)
        assert graph.find_operator("permute_0").params["0"].i == 3
        # swap (0, 2) over the three non-batch axes is (2,1,0)
        assert graph.find_operator("transpose_0").params["0"].i == 5

    def test_lowered_chain_matches_torch(self):
        graph = NcnnLower(assume_batch_dim=True).lower_text(self.GRAPH)
        x = torch.randn(1, 3, 4, 5)
        y = run_permute(graph.find_operator("permute_0"), x)
        y = run_permute(graph.find_operator("transpose_0"), y)
        assert torch.equal(y, x.permute(0, 2, 3, 1).transpose(1, 3))


class TestReferenceExecution:
    """Test that lowered operators reproduce the source permutation."""

    @pytest.mark.parametrize("perm", SMALL_RANK_PERMS + RANK5_PERMS, ids=str)
    def test_dims_match_torch(self, permute_graph, perm):
        rank = len(perm)
        graph, op = permute_graph("Tensor.permute", {"dims": list(perm)}, shape=(-1,) * rank)
        lower_graph(graph)

        x = _sample(rank)
        assert torch.equal(run_permute(op, x), x.permute(*perm))

    @pytest.mark.parametrize("perm", SMALL_RANK_PERMS, ids=str)
    def test_dims_match_numpy(self, permute_graph, perm):
        rank = len(perm)
        graph, op = permute_graph("Tensor.permute", {"dims": list(perm)}, shape=(-1,) * rank)
        lower_graph(graph)

        x = _sample(rank).numpy()
        np.testing.assert_array_equal(run_permute(op, x), np.transpose(x, perm))

    @pytest.mark.parametrize("perm", BATCH_FIXED_RANK5_PERMS, ids=str)
    def test_batched_dims_match_torch(self, permute_graph, perm):
        """Every rank-5 permutation fixing the batch axis maps to a rank-4 order type."""
        graph, op = permute_graph(
            "Tensor.permute", {"dims": list(perm)}, shape=(1, 3, 4, 5, 6), batch_index=0
        )
        lower_graph(graph)

        x = _sample(5)
        assert torch.equal(run_permute(op, x), x.permute(*perm))

    @pytest.mark.parametrize("dim0,dim1", list(combinations(range(1, 6), 2)))
    def test_batched_transpose_matches_torch(self, permute_graph, dim0, dim1):
        graph, op = permute_graph(
            "torch.transpose",
            {"dim0": dim0, "dim1": dim1},
            shape=(1, 3, 4, 5, 6, 7),
            batch_index=0,
        )
        lower_graph(graph)
        assert op.type == "Permute"

        x = _sample(6)
        assert torch.equal(run_permute(op, x), x.transpose(dim0, dim1))

    def test_rejects_other_operators(self):
        op = Operator(type="nn.ReLU", name="relu")
        with pytest.raises(ValueError, match="not a lowered permute"):
            backend_permutation(op, 4)
