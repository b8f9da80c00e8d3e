"""Simulation and reconstruction of the primary vertex in a two-layer cylindrical tracker."""

__version__ = "0.1.0"

__all__ = [
    "analysis",
    "geometry",
    "histogram",
    "plots",
    "reconstruction",
    "simulation",
]