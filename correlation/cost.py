"""Patch similarity metrics for block matching.

Each metric scores a pair of same-sized patches. Sum of absolute and squared
differences are costs (lower is better); normalized cross-correlation is a
similarity (higher is better). ``higher_is_better`` lets the block matcher turn
every metric into a quantity to minimise.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Union

import numpy as np

from imageview.geometry import VectorLike
from imageview.ops import window_sum

# Windows whose per-pixel variance falls below this are treated as flat.
NCC_EPSILON = 1e-6


class CostFunctionType(str, Enum):
    ABSOLUTE_DIFFERENCE = "absolute_difference"
    SQUARED_DIFFERENCE = "squared_difference"
    CROSS_CORRELATION = "cross_correlation"


class CostMetric(ABC):
    higher_is_better: bool = False

    @abstractmethod
    def score(self, left_patch: np.ndarray, right_patch: np.ndarray) -> float:
        """Score one pair of equally sized patches."""

    @abstractmethod
    def window_score(self, left: np.ndarray, right: np.ndarray, kernel_size: VectorLike) -> np.ndarray:
        """Score every kernel-sized window of two aligned, equally sized rasters."""


class AbsoluteCost(CostMetric):
    def score(self, left_patch: np.ndarray, right_patch: np.ndarray) -> float:
        diff = left_patch.astype(np.float64) - right_patch.astype(np.float64)
        return float(np.abs(diff).sum())

    def window_score(self, left: np.ndarray, right: np.ndarray, kernel_size: VectorLike) -> np.ndarray:
        diff = left.astype(np.float64) - right.astype(np.float64)
        return window_sum(np.abs(diff), kernel_size)


class SquaredCost(CostMetric):
    def score(self, left_patch: np.ndarray, right_patch: np.ndarray) -> float:
        diff = left_patch.astype(np.float64) - right_patch.astype(np.float64)
        return float((diff * diff).sum())

    def window_score(self, left: np.ndarray, right: np.ndarray, kernel_size: VectorLike) -> np.ndarray:
        diff = left.astype(np.float64) - right.astype(np.float64)
        return window_sum(diff * diff, kernel_size)


class NCCCost(CostMetric):
    """Normalized cross-correlation in [-1, 1]; NaN where either patch is flat."""

    higher_is_better = True

    def score(self, left_patch: np.ndarray, right_patch: np.ndarray) -> float:
        left_norm = left_patch.astype(np.float64) - left_patch.mean()
        right_norm = right_patch.astype(np.float64) - right_patch.mean()
        var_l = (left_norm * left_norm).sum()
        var_r = (right_norm * right_norm).sum()
        if var_l <= NCC_EPSILON * left_patch.size or var_r <= NCC_EPSILON * right_patch.size:
            return float("nan")
        return float((left_norm * right_norm).sum() / np.sqrt(var_l * var_r))

    def window_score(self, left: np.ndarray, right: np.ndarray, kernel_size: VectorLike) -> np.ndarray:
        left = left.astype(np.float64)
        right = right.astype(np.float64)
        n = float(np.prod(tuple(kernel_size)))

        sum_l = window_sum(left, kernel_size)
        sum_r = window_sum(right, kernel_size)
        var_l = window_sum(left * left, kernel_size) - sum_l * sum_l / n
        var_r = window_sum(right * right, kernel_size) - sum_r * sum_r / n
        cross = window_sum(left * right, kernel_size) - sum_l * sum_r / n

        denom_sq = var_l * var_r
        result = np.full(sum_l.shape, np.nan)
        ok = (var_l > NCC_EPSILON * n) & (var_r > NCC_EPSILON * n)
        result[ok] = cross[ok] / np.sqrt(denom_sq[ok])
        return result


_COST_METRICS = {
    CostFunctionType.ABSOLUTE_DIFFERENCE: AbsoluteCost,
    CostFunctionType.SQUARED_DIFFERENCE: SquaredCost,
    CostFunctionType.CROSS_CORRELATION: NCCCost,
}


def make_cost(cost_type: Union[CostFunctionType, str]) -> CostMetric:
    """Instantiate the metric for ``cost_type`` (enum member or its value)."""
    try:
        return _COST_METRICS[CostFunctionType(cost_type)]()
    except ValueError:
        raise ValueError(f"Unknown cost function: {cost_type}")


__all__ = [
    "CostFunctionType",
    "CostMetric",
    "AbsoluteCost",
    "SquaredCost",
    "NCCCost",
    "make_cost",
    "NCC_EPSILON",
]
