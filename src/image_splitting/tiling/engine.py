"""
Tiling Engine - Core tiling functionality
"""

import logging
import time
from typing import Any, List, Optional, Tuple
import numpy as np

from .buffer import ArrayBuffer, PixelBuffer, as_pixel_buffer, buffer_to_array
from .exceptions import (
    DimensionTooSmallError,
    InvalidGridError,
    InvalidTileSizeError,
    ReassemblyError
)
from .schemas import Rectangle, Tile, TilePosition, TileSet
from ..common.config import Settings, settings

logger = logging.getLogger(__name__)

TilePlan = List[Tuple[TilePosition, Rectangle]]


def validate_tile_size(tile_width: int, tile_height: int) -> None:
    """Raise InvalidTileSizeError unless both tile dimensions are positive"""
    if tile_width < 1 or tile_height < 1:
        raise InvalidTileSizeError(tile_width, tile_height)


class TilingEngine:
    """
    Splits pixel buffers into tiles

    Grid splits give the leftover pixels to the last row and column.
    Fixed-size splits clip edge tiles at the image boundary.
    """

    def __init__(self, config: Optional[Settings] = None):
        """
        Initialize tiling engine

        Args:
            config: Settings providing default grid and tile sizes
        """
        self.config = config or settings

    def plan_grid(
        self,
        image_width: int,
        image_height: int,
        rows: int,
        cols: int
    ) -> TilePlan:
        """
        Calculate tile rectangles for a rows x cols grid

        Args:
            image_width: Image width in pixels
            image_height: Image height in pixels
            rows: Number of grid rows
            cols: Number of grid columns

        Returns:
            Row-major list of (position, rectangle)
        """
        if rows < 1 or cols < 1:
            raise InvalidGridError(rows, cols)

        base_width = image_width // cols
        base_height = image_height // rows
        if base_width == 0 or base_height == 0:
            raise DimensionTooSmallError(image_width, image_height, rows, cols)

        # Last column and row take whatever the integer division left over
        last_width = image_width - base_width * (cols - 1)
        last_height = image_height - base_height * (rows - 1)

        plan = []
        for row in range(rows):
            height = last_height if row == rows - 1 else base_height
            for col in range(cols):
                width = last_width if col == cols - 1 else base_width
                plan.append((
                    TilePosition(row=row, col=col),
                    Rectangle(
                        x=col * base_width,
                        y=row * base_height,
                        width=width,
                        height=height
                    )
                ))

        logger.debug(
            f"Planned {rows}x{cols} grid over {image_width}x{image_height}: "
            f"base {base_width}x{base_height}, last {last_width}x{last_height}"
        )
        return plan

    def plan_tiles(
        self,
        image_width: int,
        image_height: int,
        tile_width: int,
        tile_height: int
    ) -> TilePlan:
        """
        Calculate tile rectangles for fixed-size tiling

        Args:
            image_width: Image width in pixels
            image_height: Image height in pixels
            tile_width: Requested tile width
            tile_height: Requested tile height

        Returns:
            Row-major list of (position, rectangle); edge tiles are clipped
        """
        validate_tile_size(tile_width, tile_height)

        plan = []
        for row, y in enumerate(range(0, image_height, tile_height)):
            height = min(tile_height, image_height - y)
            for col, x in enumerate(range(0, image_width, tile_width)):
                width = min(tile_width, image_width - x)
                plan.append((
                    TilePosition(row=row, col=col),
                    Rectangle(x=x, y=y, width=width, height=height)
                ))

        logger.debug(
            f"Planned {len(plan)} tiles of {tile_width}x{tile_height} "
            f"over {image_width}x{image_height}"
        )
        return plan

    def split_into_grid(
        self,
        image: Any,
        rows: Optional[int] = None,
        cols: Optional[int] = None
    ) -> TileSet:
        """
        Split an image into a rows x cols grid

        Args:
            image: Pixel buffer, Pillow image or numpy array
            rows: Number of rows, defaults to settings.grid_rows
            cols: Number of columns, defaults to settings.grid_cols

        Returns:
            TileSet with exactly rows * cols tiles
        """
        rows = self.config.grid_rows if rows is None else rows
        cols = self.config.grid_cols if cols is None else cols

        buffer = as_pixel_buffer(image)
        plan = self.plan_grid(buffer.width, buffer.height, rows, cols)
        return self._extract(buffer, plan, (rows, cols), "grid")

    def split_into_tiles(
        self,
        image: Any,
        tile_width: Optional[int] = None,
        tile_height: Optional[int] = None
    ) -> TileSet:
        """
        Split an image into tiles of a fixed size

        Args:
            image: Pixel buffer, Pillow image or numpy array
            tile_width: Tile width, defaults to settings.tile_width
            tile_height: Tile height, defaults to settings.tile_height

        Returns:
            TileSet with ceil(width / tile_width) * ceil(height / tile_height) tiles
        """
        tile_width = self.config.tile_width if tile_width is None else tile_width
        tile_height = self.config.tile_height if tile_height is None else tile_height

        buffer = as_pixel_buffer(image)
        plan = self.plan_tiles(buffer.width, buffer.height, tile_width, tile_height)

        rows = -(-buffer.height // tile_height)
        cols = -(-buffer.width // tile_width)
        return self._extract(buffer, plan, (rows, cols), "fixed")

    def _extract(
        self,
        buffer: PixelBuffer,
        plan: TilePlan,
        grid_size: Tuple[int, int],
        strategy: str
    ) -> TileSet:
        """Crop every planned rectangle out of the buffer"""
        start_time = time.time()

        tiles = [
            Tile(position=position, bounds=rect, image=buffer.crop(rect))
            for position, rect in plan
        ]

        processing_time = time.time() - start_time
        rows, cols = grid_size
        logger.info(
            f"Split {buffer.width}x{buffer.height} image into {rows}x{cols} "
            f"({len(tiles)} tiles) in {processing_time:.3f} seconds"
        )

        return TileSet(
            tiles=tiles,
            grid_size=grid_size,
            source_size=(buffer.width, buffer.height),
            strategy=strategy,
            source_format=getattr(buffer, 'format', None),
            processing_time=processing_time
        )

    def reassemble(self, tileset: TileSet) -> ArrayBuffer:
        """
        Paste tiles back at their offsets

        Args:
            tileset: Result of a split

        Returns:
            Array buffer of the source size
        """
        width, height = tileset.source_size
        if not tileset.tiles:
            if width * height:
                raise ReassemblyError(f"No tiles to cover {width}x{height} image")
            return ArrayBuffer(np.zeros((height, width), dtype=np.uint8))

        merged = None
        coverage = np.zeros((height, width), dtype=np.int32)

        for tile in tileset.tiles:
            rect = tile.bounds
            if not rect.fits_within(width, height):
                raise ReassemblyError(
                    f"Tile {tile.position.to_string()} extends past {width}x{height}"
                )

            tile_data = buffer_to_array(tile.image)
            if tile_data.shape[:2] != (rect.height, rect.width):
                raise ReassemblyError(
                    f"Tile {tile.position.to_string()} has shape {tile_data.shape[:2]}, "
                    f"expected {(rect.height, rect.width)}"
                )

            if merged is None:
                merged = np.zeros((height, width) + tile_data.shape[2:], dtype=tile_data.dtype)
            elif tile_data.shape[2:] != merged.shape[2:]:
                raise ReassemblyError(
                    f"Tile {tile.position.to_string()} has {tile_data.shape[2:]} channels, "
                    f"expected {merged.shape[2:]}"
                )

            merged[rect.y:rect.bottom, rect.x:rect.right] = tile_data
            coverage[rect.y:rect.bottom, rect.x:rect.right] += 1

        if (coverage == 0).any():
            raise ReassemblyError("Tiles leave gaps in the source image")
        if (coverage > 1).any():
            raise ReassemblyError("Tiles overlap")

        logger.info(f"Reassembled {len(tileset)} tiles into {width}x{height} image")
        return ArrayBuffer(merged)


def split_into_grid(image: Any, rows: Optional[int] = None, cols: Optional[int] = None) -> TileSet:
    """Split an image into a rows x cols grid with the default engine"""
    return TilingEngine().split_into_grid(image, rows, cols)


def split_into_tiles(
    image: Any,
    tile_width: Optional[int] = None,
    tile_height: Optional[int] = None
) -> TileSet:
    """Split an image into fixed-size tiles with the default engine"""
    return TilingEngine().split_into_tiles(image, tile_width, tile_height)


def reassemble(tileset: TileSet) -> ArrayBuffer:
    """Rebuild the source image from a tile set"""
    return TilingEngine().reassemble(tileset)
