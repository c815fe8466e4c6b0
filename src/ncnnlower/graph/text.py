"""Text IR reader for graphs and pattern templates.

Line format::

    7767517
    <node_count> <tensor_count>
    <op_type> <node_name> <n_in> <n_out> <inputs...> <outputs...> key=value...

Values are ints, floats, strings or ``(a,b,...)`` lists. Templates may use
``%name`` placeholders. Graphs may annotate operand shapes with
``#tensor=(d0,d1,...)dtype`` where ``?`` marks a dynamic extent.
"""

__docformat__ = "restructuredtext"
__all__ = [
    "BOUNDARY_TYPES",
    "MAGIC",
    "PatternGraph",
    "PatternNode",
    "Placeholder",
    "parse_graph_text",
    "parse_parameter_value",
    "parse_pattern_text",
]

import re
from dataclasses import dataclass

from .types import Graph, Parameter

MAGIC = "7767517"
BOUNDARY_TYPES = ("pnnx.Input", "pnnx.Output")

_SHAPE_RE = re.compile(r"^\(([^)]*)\)(\w*)$")


@dataclass(frozen=True)
class Placeholder:
    """Capture placeholder (``%name``) in a pattern template."""

    name: str


@dataclass(frozen=True)
class PatternNode:
    """One node line of a pattern template."""

    type: str
    name: str
    inputs: tuple[str, ...]
    outputs: tuple[str, ...]
    params: dict[str, Parameter | Placeholder]


@dataclass(frozen=True)
class PatternGraph:
    """Parsed pattern template.

    :param nodes: All template nodes, boundary nodes included
    """

    nodes: tuple[PatternNode, ...]

    @property
    def interior(self) -> PatternNode:
        """The single non-boundary node of the template.

        :raises ValueError: If the template does not have exactly one interior node
        """
        interior = [node for node in self.nodes if node.type not in BOUNDARY_TYPES]
        if len(interior) != 1:
            raise ValueError(
                f"Pattern must have exactly one interior node, found {len(interior)}"
            )
        return interior[0]


def _parse_scalar(text: str) -> int | float | str:
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        return text


def parse_parameter_value(text: str) -> Parameter:
    """Parse one ``key=value`` value into a parameter.

    :param text: Value text
    :return: Tagged parameter
    """
    if text.startswith("(") and text.endswith(")"):
        body = text[1:-1].strip()
        items = [_parse_scalar(item.strip()) for item in body.split(",")] if body else []
        if any(isinstance(item, str) for item in items):
            raise ValueError(f"List parameter must be numeric: {text}")
        return Parameter.from_value(items)
    return Parameter.from_value(_parse_scalar(text))


def _parse_shape(text: str) -> tuple[int, ...]:
    match = _SHAPE_RE.match(text)
    if match is None:
        raise ValueError(f"Invalid operand shape annotation: {text}")
    body = match.group(1).strip()
    if not body:
        return ()
    return tuple(-1 if dim.strip() == "?" else int(dim) for dim in body.split(","))


def _split_lines(text: str) -> tuple[int, int, list[list[str]]]:
    lines = [line.strip() for line in text.strip().splitlines() if line.strip()]
    if len(lines) < 2 or lines[0] != MAGIC:
        raise ValueError(f"Missing magic header {MAGIC}")

    counts = lines[1].split()
    if len(counts) != 2:
        raise ValueError(f"Invalid count line: {lines[1]}")
    node_count, tensor_count = int(counts[0]), int(counts[1])

    rows = [line.split() for line in lines[2:]]
    if len(rows) != node_count:
        raise ValueError(f"Header declares {node_count} nodes, found {len(rows)}")
    return node_count, tensor_count, rows


def _parse_row(
    row: list[str],
) -> tuple[str, str, list[str], list[str], list[tuple[str, str]]]:
    if len(row) < 4:
        raise ValueError(f"Invalid node line: {' '.join(row)}")
    op_type, name = row[0], row[1]
    n_in, n_out = int(row[2]), int(row[3])
    if len(row) < 4 + n_in + n_out:
        raise ValueError(f"Node '{name}' lists fewer tensors than declared")
    inputs = row[4 : 4 + n_in]
    outputs = row[4 + n_in : 4 + n_in + n_out]

    pairs = []
    for token in row[4 + n_in + n_out :]:
        key, sep, value = token.partition("=")
        if not sep or not key:
            raise ValueError(f"Invalid parameter '{token}' on node '{name}'")
        pairs.append((key, value))
    return op_type, name, inputs, outputs, pairs


def _check_tensor_count(expected: int, names: set[str]) -> None:
    if len(names) != expected:
        raise ValueError(f"Header declares {expected} tensors, found {len(names)}")


def parse_pattern_text(text: str) -> PatternGraph:
    """Parse a pattern template.

    :param text: Template text
    :return: Parsed template
    """
    _, tensor_count, rows = _split_lines(text)

    nodes = []
    tensor_names: set[str] = set()
    for row in rows:
        op_type, name, inputs, outputs, pairs = _parse_row(row)
        params: dict[str, Parameter | Placeholder] = {}
        for key, value in pairs:
            if key in params:
                raise ValueError(f"Duplicate parameter '{key}' on node '{name}'")
            if value.startswith("%"):
                params[key] = Placeholder(value[1:])
            else:
                params[key] = parse_parameter_value(value)
        tensor_names.update(inputs, outputs)
        nodes.append(
            PatternNode(
                type=op_type,
                name=name,
                inputs=tuple(inputs),
                outputs=tuple(outputs),
                params=params,
            )
        )

    _check_tensor_count(tensor_count, tensor_names)
    return PatternGraph(nodes=tuple(nodes))


def parse_graph_text(text: str) -> Graph:
    """Parse a graph in text IR form.

    :param text: Graph text
    :return: Graph with operand shapes applied from ``#`` annotations
    """
    _, tensor_count, rows = _split_lines(text)

    graph = Graph()
    for row in rows:
        op_type, name, inputs, outputs, pairs = _parse_row(row)
        params: dict[str, Parameter] = {}
        shapes: dict[str, tuple[int, ...]] = {}
        for key, value in pairs:
            if key.startswith("#"):
                shapes[key[1:]] = _parse_shape(value)
            elif value.startswith("%"):
                raise ValueError(f"Placeholder '{value}' is only valid in templates")
            elif key in params:
                raise ValueError(f"Duplicate parameter '{key}' on node '{name}'")
            else:
                params[key] = parse_parameter_value(value)

        graph.add_operator(op_type, name, inputs, outputs, params)
        for tensor_name, shape in shapes.items():
            if tensor_name not in graph.tensors:
                raise ValueError(f"Shape given for unknown tensor '{tensor_name}'")
            graph.tensors[tensor_name].shape = shape

    _check_tensor_count(tensor_count, set(graph.tensors))
    return graph
