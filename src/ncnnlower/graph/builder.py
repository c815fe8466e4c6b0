"""Graph builder.

Builds the operator graph from a normalized ONNX model. ONNX ``Transpose``
nodes become ``Tensor.permute`` operators so the permutation passes can match
them; every other node keeps its ONNX type.
"""

__docformat__ = "restructuredtext"
__all__ = ["build_graph"]

import warnings
from collections.abc import Callable
from typing import Any

from onnx import AttributeProto, ModelProto, NodeProto

from ..normalize import (
    extract_onnx_opset_version,
    get_onnx_model_input_names,
    get_onnx_model_output_names,
    get_onnx_model_shapes,
    get_onnx_nodes,
)
from ..presets import is_batch_symbol
from .types import Graph, Parameter

# Attribute kinds representable as parameters
EXTRACT_ATTR_MAP: dict[int, Callable[[AttributeProto], Any]] = {
    AttributeProto.FLOAT: lambda x: x.f,
    AttributeProto.INT: lambda x: x.i,
    AttributeProto.STRING: lambda x: x.s.decode("utf-8"),
    AttributeProto.FLOATS: lambda x: tuple(x.floats),
    AttributeProto.INTS: lambda x: tuple(x.ints),
}


def _convert_shape(
    shape: tuple[int | str, ...] | None, assume_batch_dim: bool
) -> tuple[tuple[int, ...], int | None]:
    """Convert an ONNX shape into graph extents and a batch axis.

    :param shape: Shape with int or symbolic extents (None if unknown)
    :param assume_batch_dim: Treat axis 0 of every ranked tensor as batch
    :return: Extents (-1 for symbolic) and batch axis index or None
    """
    if not shape:
        return (), None
    extents = tuple(dim if isinstance(dim, int) else -1 for dim in shape)
    first = shape[0]
    if assume_batch_dim or (isinstance(first, str) and is_batch_symbol(first)):
        return extents, 0
    return extents, None


def _extract_params(node: NodeProto) -> dict[str, Parameter]:
    params: dict[str, Parameter] = {}
    for attr in node.attribute:
        extract = EXTRACT_ATTR_MAP.get(attr.type)
        if extract is None:
            warnings.warn(
                f"Dropping attribute {attr.name} of {node.op_type} "
                f"(attribute type {attr.type} is not representable)",
                UserWarning,
                stacklevel=3,
            )
            continue
        params[attr.name] = Parameter.from_value(extract(attr))
    return params


def _transpose_params(
    node: NodeProto, params: dict[str, Parameter], rank: int | None
) -> dict[str, Parameter]:
    """Rename ONNX ``perm`` to ``dims``; an absent perm reverses the axes."""
    perm = params.pop("perm", None)
    if perm is None:
        if rank is None:
            raise ValueError(
                f"Transpose '{node.name}' has no perm and its input rank is unknown"
            )
        perm = Parameter.from_value(tuple(reversed(range(rank))))
    params["dims"] = perm
    return params


def build_graph(model: ModelProto, assume_batch_dim: bool = False) -> Graph:
    """Build the operator graph from an ONNX model.

    Model inputs and outputs become ``pnnx.Input`` / ``pnnx.Output`` boundary
    operators. Tensor shapes come from the model's typed values; a symbolic
    leading extent named like a batch dimension marks axis 0 as the batch axis.

    :param model: Normalized ONNX model
    :param assume_batch_dim: Mark axis 0 of every ranked tensor as batch
    :return: Operator graph
    """
    extract_onnx_opset_version(model)

    shapes = get_onnx_model_shapes(model)
    graph = Graph()

    def _tensor(name: str) -> None:
        if name not in graph.tensors:
            extents, batch_index = _convert_shape(shapes.get(name), assume_batch_dim)
            graph.new_tensor(name, extents, batch_index)

    for idx, input_name in enumerate(get_onnx_model_input_names(model)):
        _tensor(input_name)
        graph.add_operator("pnnx.Input", f"pnnx_input_{idx}", [], [input_name])

    for idx, node in enumerate(get_onnx_nodes(model)):
        name = node.name if node.name else (node.output[0] if node.output else f"node_{idx}")
        input_names = [n for n in node.input if n]
        output_names = [n for n in node.output if n]
        for tensor_name in (*input_names, *output_names):
            _tensor(tensor_name)

        params = _extract_params(node)
        op_type = node.op_type
        if op_type == "Transpose":
            rank = graph.tensors[input_names[0]].rank if input_names else None
            params = _transpose_params(node, params, rank)
            op_type = "Tensor.permute"

        graph.add_operator(op_type, name, input_names, output_names, params)

    for idx, output_name in enumerate(get_onnx_model_output_names(model)):
        _tensor(output_name)
        graph.add_operator("pnnx.Output", f"pnnx_output_{idx}", [output_name], [])

    return graph
