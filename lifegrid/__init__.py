"""lifegrid - Conway's Game of Life served over HTTP."""

__version__ = "0.1.0"
