"""
Errors raised by the tiler

Decode, encode and I/O failures are not wrapped here: they come straight
from Pillow or the operating system.
"""


class TilingError(ValueError):
    """Base class for tiling failures"""


class InvalidGridError(TilingError):
    """Grid rows or columns are not positive"""
    
    def __init__(self, rows: int, cols: int):
        self.rows = rows
        self.cols = cols
        super().__init__(f"Grid must have at least one row and column: {rows}x{cols}")


class InvalidTileSizeError(TilingError):
    """Tile width or height is not positive"""
    
    def __init__(self, tile_width: int, tile_height: int):
        self.tile_width = tile_width
        self.tile_height = tile_height
        super().__init__(f"Tile size must be positive: {tile_width}x{tile_height}")


class DimensionTooSmallError(TilingError):
    """Image is smaller than the requested grid resolution"""
    
    def __init__(self, width: int, height: int, rows: int, cols: int):
        self.width = width
        self.height = height
        self.rows = rows
        self.cols = cols
        super().__init__(
            f"Image {width}x{height} is too small for a {rows}x{cols} grid"
        )


class ReassemblyError(TilingError):
    """Tiles do not cover the source image exactly"""
