"""
Image splitting: deterministic grid and fixed-size image tiling
"""

from .api import split_image, split_image_with_size
from .codec import decode, encode, save_tiles, write_manifest
from .tiling import (
    TilingEngine,
    split_into_grid,
    split_into_tiles,
    reassemble,
    Rectangle,
    TilePosition,
    Tile,
    TileSet,
    PixelBuffer,
    PillowBuffer,
    ArrayBuffer,
    as_pixel_buffer,
    TilingError,
    InvalidGridError,
    InvalidTileSizeError,
    DimensionTooSmallError,
    ReassemblyError
)

__version__ = "0.1.0"

__all__ = [
    "split_image",
    "split_image_with_size",
    "decode",
    "encode",
    "save_tiles",
    "write_manifest",
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
