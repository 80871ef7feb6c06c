from .renderer import PlotlyPathRenderer

__all__ = ["PlotlyPathRenderer"]
