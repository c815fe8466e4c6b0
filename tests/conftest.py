"""Pytest configuration and shared fixtures for ncnnlower tests."""

import onnx
import pytest

from ncnnlower.graph import Graph
from tests.test_units.test_ncnnlower.fixtures.onnx_models import (
    make_relu_transpose_model,
    make_transpose_model,
)


@pytest.fixture
def transpose_model_path(tmp_path):
    """Factory saving a Transpose model and returning its path."""

    def _make(input_shape, perm, opset=17, name="transpose.onnx"):
        path = tmp_path / name
        onnx.save(make_transpose_model(input_shape, perm, opset=opset), str(path))
        return str(path)

    return _make


@pytest.fixture
def relu_transpose_model(tmp_path):
    """Create and save Relu -> Transpose -> Relu model with a symbolic batch axis."""
    path = tmp_path / "relu_transpose.onnx"
    onnx.save(make_relu_transpose_model(), str(path))
    return str(path)


@pytest.fixture
def permute_graph():
    """Factory building ``pnnx.Input -> <op> -> pnnx.Output`` graphs."""

    def _make(op_type, params, shape=(), batch_index=None):
        graph = Graph()
        graph.new_tensor("input", shape, batch_index)
        graph.add_operator("pnnx.Input", "input", [], ["input"])
        op = graph.add_operator(op_type, "op_0", ["input"], ["out"], params)
        graph.add_operator("pnnx.Output", "output", ["out"], [])
        return graph, op

    return _make
