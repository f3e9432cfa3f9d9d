"""
Path-taking entry points: decode a source, then split it
"""

from .codec import ImageSource, decode
from .tiling.engine import TilingEngine, validate_tile_size
from .tiling.schemas import TileSet


def split_image(source: ImageSource) -> TileSet:
    """
    Split an image into 9 tiles (3x3 grid)
    
    The last row and column absorb any remainder, so tiles cover the whole
    image.
    
    Args:
        source: File path, raw bytes, or binary file object
        
    Returns:
        TileSet of 9 tiles in row-major order
    """
    buffer = decode(source)
    return TilingEngine().split_into_grid(buffer, rows=3, cols=3)


def split_image_with_size(source: ImageSource, tile_width: int, tile_height: int) -> TileSet:
    """
    Split an image into tiles of the given size
    
    Tiles in the last row and column are clipped when the image size is not
    a multiple of the tile size.
    
    Args:
        source: File path, raw bytes, or binary file object
        tile_width: Tile width in pixels
        tile_height: Tile height in pixels
        
    Returns:
        TileSet in row-major order
    """
    validate_tile_size(tile_width, tile_height)
    buffer = decode(source)
    return TilingEngine().split_into_tiles(buffer, tile_width, tile_height)
