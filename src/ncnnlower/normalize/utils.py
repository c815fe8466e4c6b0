"""Utility functions for ONNX model inspection."""

__docformat__ = "restructuredtext"
__all__ = [
    "extract_onnx_opset_version",
    "get_onnx_initializers",
    "get_onnx_model_input_names",
    "get_onnx_model_output_names",
    "get_onnx_model_shapes",
    "get_onnx_nodes",
]

from onnx import ModelProto, NodeProto, TensorProto


def get_onnx_model_input_names(model: ModelProto) -> list[str]:
    """Get model input tensor names, excluding initializers.

    :param model: ONNX model
    :return: List of input tensor names
    """
    initializers = get_onnx_initializers(model)
    return [inp.name for inp in model.graph.input if inp.name not in initializers]


def get_onnx_model_output_names(model: ModelProto) -> list[str]:
    """Get model output tensor names.

    :param model: ONNX model
    :return: List of output tensor names
    """
    return [output_info.name for output_info in model.graph.output]


def get_onnx_nodes(model: ModelProto) -> list[NodeProto]:
    return list(model.graph.node)


def get_onnx_initializers(model: ModelProto) -> dict[str, TensorProto]:
    """Get all initializer tensors.

    :param model: ONNX model
    :return: Dictionary mapping initializer tensor names to TensorProto
    """
    return {init.name: init for init in model.graph.initializer}


def get_onnx_model_shapes(model: ModelProto) -> dict[str, tuple[int | str, ...] | None]:
    """Get shapes of all typed tensors in the ONNX model.

    Static extents are ints, symbolic extents keep their ``dim_param`` string,
    and extents with neither become ``"?"``. Tensors without shape
    information map to None.

    :param model: ONNX model
    :return: Dictionary mapping tensor names to shapes
    """
    shapes: dict[str, tuple[int | str, ...] | None] = {}

    def _get_shape_from_type(tensor_type) -> tuple[int | str, ...] | None:
        if not tensor_type.HasField("shape"):
            return None
        dims: list[int | str] = []
        for d in tensor_type.shape.dim:
            if d.HasField("dim_value"):
                dims.append(d.dim_value)
            elif d.dim_param:
                dims.append(d.dim_param)
            else:
                dims.append("?")
        return tuple(dims)

    value_infos = [
        *model.graph.input,
        *model.graph.output,
        *model.graph.value_info,
    ]
    for value_info in value_infos:
        shapes[value_info.name] = _get_shape_from_type(value_info.type.tensor_type)

    for name, init in get_onnx_initializers(model).items():
        shapes.setdefault(name, tuple(init.dims))

    return shapes


def extract_onnx_opset_version(model: ModelProto) -> int:
    """Extract ONNX opset version from model.

    :param model: ONNX model
    :return: Opset version
    """
    if not model.opset_import:
        raise ValueError("Model has no opset_import")

    for opset in model.opset_import:
        if opset.domain == "" or opset.domain == "ai.onnx":
            return opset.version  # type: ignore[no-any-return]

    raise ValueError("Model has no primary opset (domain='' or 'ai.onnx')")
