"""
Codec pass-through: decoding sources, encoding and saving tiles

Pillow does all decoding and encoding. Its errors, and any I/O errors,
reach the caller unchanged.
"""

import io
import json
import logging
import os
from pathlib import Path
from typing import Any, BinaryIO, List, Optional, Union
import numpy as np
from PIL import Image
from tqdm import tqdm

from .common.config import settings
from .tiling.buffer import PillowBuffer, PixelBuffer, buffer_to_array
from .tiling.schemas import TileSet

logger = logging.getLogger(__name__)

ImageSource = Union[str, os.PathLike, bytes, bytearray, memoryview, BinaryIO]

PREFERRED_EXTENSIONS = {
    'JPEG': '.jpg',
    'PNG': '.png',
    'TIFF': '.tif',
    'GIF': '.gif',
    'BMP': '.bmp',
    'WEBP': '.webp'
}


def decode(source: ImageSource) -> PillowBuffer:
    """
    Decode an image fully into memory

    Args:
        source: File path, raw bytes, or binary file object

    Returns:
        Pillow-backed pixel buffer carrying the decoded format
    """
    if isinstance(source, (bytes, bytearray, memoryview)):
        fp = io.BytesIO(bytes(source))
    else:
        fp = source

    with Image.open(fp) as img:
        img.load()
        image_format = img.format
        # Detach from the file handle so it can close
        image = img.copy()

    logger.debug(f"Decoded {image.width}x{image.height} {image_format} image ({image.mode})")
    return PillowBuffer(image, format=image_format)


def to_pil_image(buffer: Any) -> Image.Image:
    """Get a Pillow image for any pixel buffer"""
    if isinstance(buffer, PillowBuffer):
        return buffer.image
    if isinstance(buffer, Image.Image):
        return buffer
    array = buffer if isinstance(buffer, np.ndarray) else buffer_to_array(buffer)
    return Image.fromarray(array)


def normalize_format(format: str) -> str:
    """
    Map a format name or file extension alias to Pillow's format name

    "jpg", ".tif" and "png" become "JPEG", "TIFF" and "PNG". Unknown names
    are returned upper-cased and left for Pillow to reject.
    """
    extensions = Image.registered_extensions()
    name = format.upper()
    if name in set(extensions.values()):
        return name
    return extensions.get(f".{format.lower().lstrip('.')}", name)


def resolve_format(buffer: Any, format: Optional[str] = None) -> str:
    """
    Pick the encoding format for a buffer

    Explicit format first, then the buffer's decoded format, then
    settings.default_format.
    """
    source_format = getattr(buffer, 'format', None)
    if format:
        resolved = normalize_format(format)
        if source_format and resolved != source_format:
            logger.warning(f"Re-encoding {source_format} data as {resolved}")
        return resolved
    return source_format or normalize_format(settings.default_format)


def extension_for(format: str) -> str:
    """File extension for a Pillow format name"""
    format = normalize_format(format)
    if format in PREFERRED_EXTENSIONS:
        return PREFERRED_EXTENSIONS[format]
    for ext, name in Image.registered_extensions().items():
        if name == format:
            return ext
    return f".{format.lower()}"


def encode(buffer: PixelBuffer, format: Optional[str] = None) -> bytes:
    """
    Encode a pixel buffer

    Args:
        buffer: Pixel buffer to encode
        format: Pillow format name, defaults to the buffer's decoded format

    Returns:
        Encoded image bytes
    """
    image_format = resolve_format(buffer, format)
    output = io.BytesIO()
    to_pil_image(buffer).save(output, format=image_format)
    return output.getvalue()


def save_tiles(
    tileset: TileSet,
    output_dir: Optional[Union[str, os.PathLike]] = None,
    prefix: str = "tile",
    format: Optional[str] = None
) -> List[Path]:
    """
    Save every tile to disk

    Args:
        tileset: Result of a split
        output_dir: Target directory, defaults to settings.output_dir
        prefix: File name prefix
        format: Pillow format name, defaults to the source format

    Returns:
        Written paths, in tile order
    """
    out_dir = Path(output_dir or settings.output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    paths = []
    with tqdm(total=len(tileset), desc="Saving tiles", disable=not settings.show_progress) as pbar:
        for tile in tileset:
            image_format = resolve_format(tile.image, format)
            tile_name = f"{prefix}_{tile.position.to_string()}{extension_for(image_format)}"
            tile_path = out_dir / tile_name

            to_pil_image(tile.image).save(tile_path, format=image_format)

            paths.append(tile_path)
            pbar.update(1)

    logger.info(f"Saved {len(paths)} tiles to {out_dir}")
    return paths


def write_manifest(
    tileset: TileSet,
    path: Union[str, os.PathLike],
    tile_paths: Optional[List[Union[str, os.PathLike]]] = None
) -> Path:
    """
    Write tile metadata as JSON

    Args:
        tileset: Result of a split
        path: Manifest file path
        tile_paths: Optional saved tile paths; only file names are recorded

    Returns:
        Manifest path
    """
    manifest_path = Path(path)
    names = [Path(p).name for p in tile_paths] if tile_paths is not None else None
    data = tileset.to_manifest(names)

    manifest_path.parent.mkdir(parents=True, exist_ok=True)
    with open(manifest_path, 'w') as f:
        json.dump(data, f, indent=2)

    logger.debug(f"Wrote manifest for {len(tileset)} tiles to {manifest_path}")
    return manifest_path
