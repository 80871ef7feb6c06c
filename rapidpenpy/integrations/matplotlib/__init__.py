from .renderer import MatplotlibPathRenderer

__all__ = ["MatplotlibPathRenderer"]
