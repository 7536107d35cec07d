"""Stereo correlation module."""

from .consistency import ConsistencyMetric, cross_corr_consistency_check
from .cost import CostFunctionType, make_cost
from .flat import CorrelationView, correlate
from .prefilter import make_prefilter
from .pyramid_view import PyramidCorrelationView, pyramid_correlate
from .subdivide import subdivide_regions
from .types import DisparityMap, PixelMask, Zone

__all__ = [
    "ConsistencyMetric",
    "cross_corr_consistency_check",
    "CostFunctionType",
    "make_cost",
    "CorrelationView",
    "correlate",
    "make_prefilter",
    "PyramidCorrelationView",
    "pyramid_correlate",
    "subdivide_regions",
    "DisparityMap",
    "PixelMask",
    "Zone",
]
