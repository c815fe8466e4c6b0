"""Stage 2: Graph Construction.

This module defines the operator graph model and builds it from ONNX models
or from text IR.
"""

__docformat__ = "restructuredtext"
__all__ = [
    "Graph",
    "MissingParameterError",
    "Operator",
    "Parameter",
    "ParameterKind",
    "ParameterTypeError",
    "PatternGraph",
    "PatternNode",
    "Placeholder",
    "Tensor",
    "build_graph",
    "get_parameter",
    "parse_graph_text",
    "parse_pattern_text",
]

from .builder import build_graph
from .text import PatternGraph, PatternNode, Placeholder, parse_graph_text, parse_pattern_text
from .types import (
    Graph,
    MissingParameterError,
    Operator,
    Parameter,
    ParameterKind,
    ParameterTypeError,
    Tensor,
    get_parameter,
)
