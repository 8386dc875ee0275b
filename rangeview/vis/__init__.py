from .base_vis import BaseVis
from .vis_registry import VisRegistry
from .heat_map_vis import HeatmapVis
from .histogram_vis import HistogramVis
from .multiform import MultiForm


def default_registry() -> VisRegistry:
    """Registry with the built-in plugins."""
    registry = VisRegistry()
    registry.register(HeatmapVis)
    registry.register(HistogramVis)
    return registry


__all__ = ["BaseVis", "HeatmapVis", "HistogramVis", "MultiForm", "VisRegistry", "default_registry"]
