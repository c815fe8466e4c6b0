"""Synthetic ONNX models for lowering tests."""

import onnx
import onnx.helper as onnx_helper


def make_transpose_model(
    input_shape: list[int | str] | None,
    perm: list[int] | None,
    opset: int = 17,
) -> onnx.ModelProto:
    """Build a single Transpose model ``X -> Transpose -> Y``.

    The output carries the permuted input shape, so the model passes
    ``onnx.checker``. With an unknown input shape the output shape is unknown
    too and the model is only usable without the checker.

    :param input_shape: Input extents (strings for symbolic extents), None for unknown
    :param perm: Transpose perm attribute, None to omit it
    :param opset: Default-domain opset version
    """
    X = onnx_helper.make_tensor_value_info("X", onnx.TensorProto.FLOAT, input_shape)  # noqa: N806
    output_shape = None
    if input_shape is not None:
        order = perm if perm is not None else reversed(range(len(input_shape)))
        output_shape = [input_shape[axis] for axis in order]
    Y = onnx_helper.make_tensor_value_info("Y", onnx.TensorProto.FLOAT, output_shape)  # noqa: N806
    attrs = {} if perm is None else {"perm": perm}
    node = onnx_helper.make_node("Transpose", inputs=["X"], outputs=["Y"], name="transpose", **attrs)
    graph = onnx_helper.make_graph([node], "TransposeModel", [X], [Y])
    model = onnx_helper.make_model(graph, opset_imports=[onnx_helper.make_opsetid("", opset)])
    model.ir_version = 8
    return model


def make_relu_transpose_model() -> onnx.ModelProto:
    """Build ``Relu -> Transpose(0,2,3,1) -> Relu`` with a symbolic batch axis."""
    X = onnx_helper.make_tensor_value_info("X", onnx.TensorProto.FLOAT, ["N", 3, 4, 5])  # noqa: N806
    Y = onnx_helper.make_tensor_value_info("Y", onnx.TensorProto.FLOAT, ["N", 4, 5, 3])  # noqa: N806
    nodes = [
        onnx_helper.make_node("Relu", inputs=["X"], outputs=["a"], name="relu_0"),
        onnx_helper.make_node(
            "Transpose", inputs=["a"], outputs=["b"], name="to_nhwc", perm=[0, 2, 3, 1]
        ),
        onnx_helper.make_node("Relu", inputs=["b"], outputs=["Y"], name="relu_1"),
    ]
    graph = onnx_helper.make_graph(nodes, "ReluTransposeModel", [X], [Y])
    model = onnx_helper.make_model(graph, opset_imports=[onnx_helper.make_opsetid("", 17)])
    model.ir_version = 8
    return model
