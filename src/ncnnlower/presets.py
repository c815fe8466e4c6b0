"""Preset configurations for batch axis detection.

Imported models mark the batch axis with a symbolic leading extent. The
backend keeps that axis implicit, so lowering passes strip it.
"""

__docformat__ = "restructuredtext"
__all__ = [
    "BATCH_DIM_SYMBOLS",
    "is_batch_symbol",
]


# Symbolic dimension names treated as the batch axis
BATCH_DIM_SYMBOLS = (
    "N",
    "n",
    "batch",
    "batch_size",
    "Batch",
    "BatchSize",
)


def is_batch_symbol(dim_param: str) -> bool:
    """Determine if a symbolic extent names the batch axis.

    :param dim_param: ONNX ``dim_param`` string
    :return: True if the symbol is a known batch dimension name
    """
    return dim_param in BATCH_DIM_SYMBOLS
