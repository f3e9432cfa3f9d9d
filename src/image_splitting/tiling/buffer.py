"""
Pixel buffer back-ends

The tiler only needs width, height and crop from an image, so any object
providing those (see ``PixelBuffer``) can be split. Pillow images and numpy
arrays are wrapped by the adapters below.
"""

from typing import Any, Optional, Protocol, Tuple, Union, runtime_checkable
import numpy as np
from PIL import Image

from .schemas import Rectangle


@runtime_checkable
class PixelBuffer(Protocol):
    """Read-only pixel grid that can copy out a rectangle of itself"""

    @property
    def width(self) -> int: ...

    @property
    def height(self) -> int: ...

    def get_pixel(self, x: int, y: int) -> Any: ...

    def crop(self, rect: Rectangle) -> "PixelBuffer": ...


class PillowBuffer:
    """
    Pixel buffer backed by a Pillow image
    Keeps the decoded format so tiles can be re-encoded the same way
    """

    def __init__(self, image: Image.Image, format: Optional[str] = None):
        """
        Initialize buffer

        Args:
            image: Pillow image, never modified
            format: Codec format name, defaults to the image's own
        """
        self.image = image
        self.format = format or image.format

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    @property
    def mode(self) -> str:
        return self.image.mode

    def get_pixel(self, x: int, y: int) -> Any:
        return self.image.getpixel((x, y))

    def crop(self, rect: Rectangle) -> "PillowBuffer":
        """Copy the rectangle into a new image"""
        return PillowBuffer(self.image.crop(rect.box), format=self.format)

    def to_array(self) -> np.ndarray:
        return np.asarray(self.image)

    def __repr__(self) -> str:
        return f"PillowBuffer({self.width}x{self.height}, mode={self.mode}, format={self.format})"


class ArrayBuffer:
    """Pixel buffer backed by a (height, width) or (height, width, channels) array"""

    def __init__(self, array: np.ndarray):
        if array.ndim not in (2, 3):
            raise ValueError(f"Expected a 2-D or 3-D array, got shape {array.shape}")
        self.array = array
        self.format = None

    @property
    def width(self) -> int:
        return self.array.shape[1]

    @property
    def height(self) -> int:
        return self.array.shape[0]

    def get_pixel(self, x: int, y: int) -> Union[Any, Tuple[Any, ...]]:
        value = self.array[y, x]
        if self.array.ndim == 3:
            return tuple(value.tolist())
        return value.item()

    def crop(self, rect: Rectangle) -> "ArrayBuffer":
        """Copy the rectangle into a new array"""
        return ArrayBuffer(self.array[rect.y:rect.bottom, rect.x:rect.right].copy())

    def to_array(self) -> np.ndarray:
        return self.array

    def __repr__(self) -> str:
        return f"ArrayBuffer({self.width}x{self.height}, dtype={self.array.dtype})"


def as_pixel_buffer(obj: Any) -> PixelBuffer:
    """
    Wrap an image object as a pixel buffer

    Args:
        obj: Pillow image, numpy array, or an object already providing
            the buffer interface

    Returns:
        Pixel buffer over obj, without copying
    """
    if isinstance(obj, Image.Image):
        return PillowBuffer(obj)
    if isinstance(obj, np.ndarray):
        return ArrayBuffer(obj)
    if isinstance(obj, PixelBuffer):
        return obj
    raise TypeError(f"Unsupported image type: {type(obj).__name__}")


def buffer_to_array(buffer: PixelBuffer) -> np.ndarray:
    """
    Read a whole buffer into a numpy array

    Buffers without a ``to_array`` method are read pixel by pixel.
    """
    if hasattr(buffer, 'to_array'):
        return np.asarray(buffer.to_array())

    rows = [
        [buffer.get_pixel(x, y) for x in range(buffer.width)]
        for y in range(buffer.height)
    ]
    return np.array(rows)
