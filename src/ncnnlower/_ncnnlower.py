__docformat__ = "restructuredtext"
__all__ = ["NcnnLower"]

import onnx

from ncnnlower.graph import Graph


class NcnnLower:
    def __init__(
        self,
        verbose: bool = False,
        explicit_axes: bool = False,
        assume_batch_dim: bool = False,
        target_opset: int | None = None,
    ):
        self.verbose = verbose
        self.explicit_axes = explicit_axes
        self.assume_batch_dim = assume_batch_dim
        self.target_opset = target_opset

    def lower_onnx(self, onnx_path: str) -> Graph:
        """Load an ONNX model and lower its permutations to backend operators.

        :param onnx_path: Path to input ONNX model
        :return: Lowered graph
        """
        model = self.preprocess(onnx_path)

        from ncnnlower.graph import build_graph

        graph = build_graph(model, assume_batch_dim=self.assume_batch_dim)
        return self._lower(graph)

    def lower_text(self, text: str) -> Graph:
        """Parse a text IR graph and lower its permutations.

        :param text: Graph text
        :return: Lowered graph
        """
        from ncnnlower.graph import parse_graph_text

        graph = parse_graph_text(text)
        if self.assume_batch_dim:
            for tensor in graph.tensors.values():
                if tensor.rank is not None:
                    tensor.batch_index = 0
        return self._lower(graph)

    def _lower(self, graph: Graph) -> Graph:
        from ncnnlower.passes import LoweringOptions, lower_graph

        report = lower_graph(graph, options=LoweringOptions(explicit_axes=self.explicit_axes))

        if self.verbose:
            print(f"Lowered: {report.summary()}")
            for name in report.failed:
                print(f"Not lowered: {name}")

        return graph

    def preprocess(self, onnx_path: str) -> onnx.ModelProto:
        """Load and preprocess an ONNX model.

        :param onnx_path: Path to ONNX model
        :return: Preprocessed model
        """
        from ncnnlower.normalize import load_and_preprocess_onnx_model

        return load_and_preprocess_onnx_model(
            onnx_path,
            target_opset=self.target_opset,
            infer_shapes=True,
            check_model=True,
        )
