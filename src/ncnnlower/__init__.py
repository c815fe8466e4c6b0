__docformat__ = "restructuredtext"
__version__ = "2026.1.0"
__all__ = [
    "BATCH_DIM_SYMBOLS",
    "NcnnLower",
    "is_batch_symbol",
]

from ncnnlower._ncnnlower import NcnnLower
from ncnnlower.presets import BATCH_DIM_SYMBOLS, is_batch_symbol
