"""
Schemas for tiling module
"""

from datetime import datetime
from typing import List, Tuple, Optional, Dict, Any, Iterator
from pydantic import BaseModel, ConfigDict, Field, field_validator


class Rectangle(BaseModel):
    """Tile position and size within the source image, in pixels"""
    model_config = ConfigDict(frozen=True)

    x: int = Field(ge=0)
    y: int = Field(ge=0)
    width: int = Field(ge=1)
    height: int = Field(ge=1)

    @property
    def right(self) -> int:
        """Exclusive right edge"""
        return self.x + self.width

    @property
    def bottom(self) -> int:
        """Exclusive bottom edge"""
        return self.y + self.height

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def box(self) -> Tuple[int, int, int, int]:
        """Bounds as (left, upper, right, lower), the form Pillow crops with"""
        return (self.x, self.y, self.right, self.bottom)

    def fits_within(self, width: int, height: int) -> bool:
        """Check the rectangle lies inside an image of the given size"""
        return self.right <= width and self.bottom <= height


class TilePosition(BaseModel):
    """Position of tile in the grid"""
    model_config = ConfigDict(frozen=True)

    row: int
    col: int

    def to_string(self) -> str:
        """Convert to string format for naming"""
        return f"{self.row:03d}_{self.col:03d}"


class Tile(BaseModel):
    """A single extracted tile"""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    position: TilePosition
    bounds: Rectangle
    image: Any = Field(exclude=True, repr=False)

    @property
    def size(self) -> Tuple[int, int]:
        """Tile (width, height)"""
        return self.bounds.width, self.bounds.height


class TileSet(BaseModel):
    """Ordered result of a split, row-major"""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    tiles: List[Tile]
    grid_size: Tuple[int, int]  # rows, cols
    source_size: Tuple[int, int]  # width, height
    strategy: str
    source_format: Optional[str] = None
    processing_time: float = 0.0  # seconds
    created_at: datetime = Field(default_factory=datetime.now)

    @field_validator('strategy')
    @classmethod
    def validate_strategy(cls, v):
        """Validate split strategy"""
        if v not in ('grid', 'fixed'):
            raise ValueError(f"Invalid strategy: {v}")
        return v

    def __len__(self) -> int:
        return len(self.tiles)

    def __getitem__(self, index: int) -> Tile:
        return self.tiles[index]

    def __iter__(self) -> Iterator[Tile]:
        return iter(self.tiles)

    @property
    def images(self) -> List[Any]:
        """Tile pixel buffers in row-major order"""
        return [tile.image for tile in self.tiles]

    @property
    def rectangles(self) -> List[Rectangle]:
        return [tile.bounds for tile in self.tiles]

    def get_tile_by_position(self, row: int, col: int) -> Optional[Tile]:
        """Get tile by grid position"""
        rows, cols = self.grid_size
        if not (0 <= row < rows and 0 <= col < cols):
            return None
        return self.tiles[row * cols + col]

    def get_coverage_map(self) -> Dict[str, Any]:
        """Get coverage statistics"""
        width, height = self.source_size
        covered_area = sum(tile.bounds.area for tile in self.tiles)

        return {
            'total_tiles': len(self.tiles),
            'grid_size': self.grid_size,
            'covered_area': covered_area,
            'image_area': width * height,
            'strategy': self.strategy
        }

    def to_manifest(self, tile_paths: Optional[List[str]] = None) -> Dict[str, Any]:
        """
        Describe the tile set without pixel data

        Args:
            tile_paths: Optional file names, one per tile in order

        Returns:
            JSON-serializable dictionary
        """
        if tile_paths is not None and len(tile_paths) != len(self.tiles):
            raise ValueError(
                f"Expected {len(self.tiles)} tile paths, got {len(tile_paths)}"
            )

        entries = []
        for i, tile in enumerate(self.tiles):
            entry = {
                'index': i,
                'position': tile.position.model_dump(),
                'bounds': tile.bounds.model_dump()
            }
            if tile_paths is not None:
                entry['file'] = str(tile_paths[i])
            entries.append(entry)

        return {
            'strategy': self.strategy,
            'grid_size': list(self.grid_size),
            'source_size': list(self.source_size),
            'source_format': self.source_format,
            'total_tiles': len(self.tiles),
            'created_at': self.created_at.isoformat(),
            'tiles': entries
        }
