"""Game of Life engine"""

from .universe import Cell, Universe, ALIVE_SYMBOL, DEAD_SYMBOL

__all__ = ["Cell", "Universe", "ALIVE_SYMBOL", "DEAD_SYMBOL"]
