"""
Tiling Module
Splits pixel buffers into grids or fixed-size tiles
"""

from .engine import TilingEngine, split_into_grid, split_into_tiles, reassemble
from .schemas import Rectangle, TilePosition, Tile, TileSet
from .buffer import PixelBuffer, PillowBuffer, ArrayBuffer, as_pixel_buffer
from .exceptions import (
    TilingError,
    InvalidGridError,
    InvalidTileSizeError,
    DimensionTooSmallError,
    ReassemblyError
)

__all__ = [
    "TilingEngine",
    "split_into_grid",
    "split_into_tiles",
    "reassemble",
    "Rectangle",
    "TilePosition",
    "Tile",
    "TileSet",
    "PixelBuffer",
    "PillowBuffer",
    "ArrayBuffer",
    "as_pixel_buffer",
    "TilingError",
    "InvalidGridError",
    "InvalidTileSizeError",
    "DimensionTooSmallError",
    "ReassemblyError"
]
