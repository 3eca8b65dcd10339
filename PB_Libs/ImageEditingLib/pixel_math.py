"""
Small numeric helpers shared by the pixel kernels.

Rounding is half-up (2.5 -> 3), which is what 8-bit canvas pixel storage
does, rather than Python's banker's rounding.
"""

import math
from typing import Any

import numpy as np


def round_half_up(value: float) -> int:
    """Round a scalar to the nearest integer, halves rounding up."""
    return int(math.floor(value + 0.5))


def clamp(value: float, low: float, high: float) -> float:
    """Clamp a scalar into [low, high]."""
    return max(low, min(high, value))


def to_byte_array(values: Any) -> np.ndarray:
    """Round half-up, clamp to [0, 255] and cast a float array to uint8."""
    return np.clip(np.floor(np.asarray(values, dtype=np.float64) + 0.5), 0, 255).astype(np.uint8)
