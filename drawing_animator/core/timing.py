"""
Millisecond arithmetic shared by the allocator and the synchronizer.

Durations are split with CUMULATIVE boundaries: each boundary is computed
from the total, so rounding never drifts and the parts always sum exactly
to the whole.
"""

import math
from typing import List, Sequence

import numpy as np


def round_ms(value: float) -> int:
    """Round half up to an integer millisecond (round() would round half to even)"""
    return int(math.floor(value + 0.5))


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def split_duration(total_ms: int, weights: Sequence[float]) -> List[int]:
    """
    Split total_ms into len(weights) integer parts proportional to weights.

    Zero or negative total weight falls back to an even split.
    """
    count = len(weights)
    if count == 0:
        return []

    w = np.asarray(weights, dtype=float)
    if w.sum() <= 0:
        w = np.ones(count)

    boundaries = np.floor(total_ms * np.cumsum(w) / w.sum() + 0.5).astype(np.int64)
    boundaries[-1] = total_ms
    starts = np.concatenate(([0], boundaries[:-1]))
    return [int(d) for d in boundaries - starts]


def progress_table(point_count: int) -> List[float]:
    """Fraction of the duration reached at each recorded point: (i + 1) / n"""
    if point_count <= 0:
        return []
    return [float(p) for p in np.arange(1, point_count + 1) / point_count]


def to_frame(ms: int, frame_rate: int) -> int:
    """Index of the frame showing a given millisecond (floor)"""
    return int(ms) * int(frame_rate) // 1000
