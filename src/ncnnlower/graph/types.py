"""Graph model type definitions.

Defines the Parameter tagged union, Tensor, Operator and Graph containers
that lowering passes read and rewrite.
"""

__docformat__ = "restructuredtext"
__all__ = [
    "Graph",
    "MissingParameterError",
    "Operator",
    "Parameter",
    "ParameterKind",
    "ParameterTypeError",
    "Tensor",
    "get_parameter",
]

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ParameterKind(Enum):
    """Closed set of parameter value kinds.

    :cvar INT: Single integer
    :cvar FLOAT: Single float
    :cvar STRING: String
    :cvar INTS: Ordered integer list
    :cvar FLOATS: Ordered float list
    """

    INT = "int"
    FLOAT = "float"
    STRING = "string"
    INTS = "ints"
    FLOATS = "floats"


class ParameterTypeError(TypeError):
    """Raised when a parameter is read with the wrong kind."""


class MissingParameterError(KeyError):
    """Raised when a parameter key is absent."""


@dataclass(frozen=True)
class Parameter:
    """Tagged operator parameter value.

    List values are stored as tuples so parameters stay immutable and hashable.

    :param kind: Value kind tag
    :param value: Python value matching the tag
    """

    kind: ParameterKind
    value: int | float | str | tuple[int, ...] | tuple[float, ...]

    @classmethod
    def from_value(cls, value: Any) -> "Parameter":
        """Build a parameter, inferring its kind from the Python value.

        :param value: int, float, str, or a list/tuple of ints or floats
        :return: Tagged parameter
        :raises TypeError: If the value does not fit any parameter kind
        """
        if isinstance(value, bool):
            raise TypeError("Boolean parameter values are not supported")
        if isinstance(value, int):
            return cls(ParameterKind.INT, value)
        if isinstance(value, float):
            return cls(ParameterKind.FLOAT, value)
        if isinstance(value, str):
            return cls(ParameterKind.STRING, value)
        if isinstance(value, (list, tuple)):
            if any(isinstance(v, bool) or not isinstance(v, (int, float)) for v in value):
                raise TypeError(f"Unsupported list parameter value: {value!r}")
            if any(isinstance(v, float) for v in value):
                return cls(ParameterKind.FLOATS, tuple(float(v) for v in value))
            return cls(ParameterKind.INTS, tuple(value))
        raise TypeError(f"Unsupported parameter value: {value!r}")

    def _expect(self, kind: ParameterKind) -> Any:
        if self.kind is not kind:
            raise ParameterTypeError(
                f"Parameter holds {self.kind.value}, expected {kind.value}"
            )
        return self.value

    @property
    def i(self) -> int:
        return self._expect(ParameterKind.INT)  # type: ignore[no-any-return]

    @property
    def f(self) -> float:
        return self._expect(ParameterKind.FLOAT)  # type: ignore[no-any-return]

    @property
    def s(self) -> str:
        return self._expect(ParameterKind.STRING)  # type: ignore[no-any-return]

    @property
    def ai(self) -> tuple[int, ...]:
        return self._expect(ParameterKind.INTS)  # type: ignore[no-any-return]

    @property
    def af(self) -> tuple[float, ...]:
        return self._expect(ParameterKind.FLOATS)  # type: ignore[no-any-return]

    def __str__(self) -> str:
        if self.kind in (ParameterKind.INTS, ParameterKind.FLOATS):
            return "(" + ",".join(str(v) for v in self.value) + ")"  # type: ignore[union-attr]
        return str(self.value)


def get_parameter(params: Mapping[str, Parameter], key: str) -> Parameter:
    """Look up a parameter by name.

    :param params: Parameter map (operator params or captured params)
    :param key: Parameter name
    :return: Parameter
    :raises MissingParameterError: If the key is absent
    """
    try:
        return params[key]
    except KeyError:
        raise MissingParameterError(f"Missing parameter '{key}'") from None


@dataclass
class Tensor:
    """Graph tensor (operand).

    :param name: Tensor name
    :param shape: Extents; empty when the rank is unknown, -1 for dynamic extents
    :param batch_index: Axis the backend treats as implicit, or None
    :param producer: Name of the single producing operator (None for graph inputs)
    :param consumers: Names of operators that read this tensor
    """

    name: str
    shape: tuple[int, ...] = ()
    batch_index: int | None = None
    producer: str | None = None
    consumers: list[str] = field(default_factory=list)

    @property
    def rank(self) -> int | None:
        """Declared rank, or None when the shape is unknown."""
        return len(self.shape) if self.shape else None


@dataclass
class Operator:
    """Graph operator (node).

    :param type: Operator type tag (e.g., "Tensor.permute", "Permute", "Noop")
    :param name: Operator name
    :param inputs: Ordered input tensors (referenced, not owned)
    :param outputs: Ordered output tensors (owned)
    :param params: Named parameters
    """

    type: str
    name: str
    inputs: list[Tensor] = field(default_factory=list)
    outputs: list[Tensor] = field(default_factory=list)
    params: dict[str, Parameter] = field(default_factory=dict)


@dataclass
class Graph:
    """Operator graph.

    :param operators: Operators in topological order
    :param tensors: All tensors by name
    """

    operators: list[Operator] = field(default_factory=list)
    tensors: dict[str, Tensor] = field(default_factory=dict)

    def new_tensor(
        self,
        name: str,
        shape: tuple[int, ...] = (),
        batch_index: int | None = None,
    ) -> Tensor:
        """Get an existing tensor by name or create it.

        Shape and batch index are only applied when the tensor is created.
        """
        tensor = self.tensors.get(name)
        if tensor is None:
            tensor = Tensor(name=name, shape=tuple(shape), batch_index=batch_index)
            self.tensors[name] = tensor
        return tensor

    def add_operator(
        self,
        op_type: str,
        name: str,
        input_names: list[str],
        output_names: list[str],
        params: Mapping[str, Any] | None = None,
    ) -> Operator:
        """Append an operator and wire its tensors.

        Raw parameter values are converted with :meth:`Parameter.from_value`.

        :raises ValueError: If an output tensor already has a producer
        """
        op = Operator(type=op_type, name=name)
        for key, value in (params or {}).items():
            op.params[key] = value if isinstance(value, Parameter) else Parameter.from_value(value)

        for tensor_name in input_names:
            tensor = self.new_tensor(tensor_name)
            tensor.consumers.append(name)
            op.inputs.append(tensor)

        for tensor_name in output_names:
            tensor = self.new_tensor(tensor_name)
            if tensor.producer is not None:
                raise ValueError(
                    f"Tensor '{tensor_name}' is already produced by '{tensor.producer}'"
                )
            tensor.producer = name
            op.outputs.append(tensor)

        self.operators.append(op)
        return op

    def find_operator(self, name: str) -> Operator | None:
        """Find an operator by name."""
        return next((op for op in self.operators if op.name == name), None)
