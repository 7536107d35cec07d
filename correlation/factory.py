"""Build correlation views from configuration."""

from __future__ import annotations

import numpy as np

from configs.settings import AppConfig
from correlation.flat import CorrelationView
from correlation.prefilter import make_prefilter
from correlation.pyramid_view import PyramidCorrelationView
from correlation.types import DisparityMap
from imageview.geometry import BBox
from imageview.rasterize import rasterize
from imageview.view import TiledView
from log_config.logger import get_logger

logger = get_logger(__name__)

_VIEWS = {
    "pyramid": PyramidCorrelationView,
    "flat": CorrelationView,
}


def create_correlation_view(config: AppConfig, left: np.ndarray, right: np.ndarray) -> TiledView:
    """Instantiate the correlator selected by ``config.correlation.mode``."""
    settings = config.correlation
    try:
        view_class = _VIEWS[settings.mode]
    except KeyError:
        raise ValueError(f"Unknown correlation mode: {settings.mode}")

    prefilter = make_prefilter(config.prefilter.type, config.prefilter.sigma)
    search_region = BBox.from_corners(*settings.search_region)
    logger.debug(
        f"Creating {view_class.__name__}: search {search_region}, kernel {settings.kernel_size}, "
        f"cost {settings.cost_type}, consistency {settings.consistency_threshold}"
    )
    return view_class(
        left,
        right,
        prefilter,
        search_region,
        settings.kernel_size,
        cost_type=settings.cost_type,
        consistency_threshold=settings.consistency_threshold,
        consistency_metric=settings.consistency_metric,
    )


def correlate_images(config: AppConfig, left: np.ndarray, right: np.ndarray) -> DisparityMap:
    """Correlate a full image pair tile by tile as configured."""
    view = create_correlation_view(config, left, right)
    return rasterize(
        view,
        tile_size=config.tiling.tile_size,
        num_workers=config.tiling.num_workers,
    )


__all__ = ["create_correlation_view", "correlate_images"]
