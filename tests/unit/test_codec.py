"""
Unit tests for codec pass-through and path-taking entry points
"""

import io
import json

import pytest
import numpy as np
from PIL import Image, UnidentifiedImageError

from image_splitting import (
    split_image,
    split_image_with_size,
    split_into_grid,
    decode,
    encode,
    save_tiles,
    write_manifest,
    reassemble,
    PillowBuffer,
    ArrayBuffer,
    InvalidTileSizeError,
    DimensionTooSmallError
)
from image_splitting.codec import extension_for, normalize_format


def png_bytes(width=30, height=30, mode="RGB"):
    """Encode a random image as PNG"""
    rng = np.random.default_rng(2)
    channels = {"L": None, "RGB": 3, "RGBA": 4}[mode]
    shape = (height, width) if channels is None else (height, width, channels)
    image = Image.fromarray(rng.integers(0, 256, size=shape, dtype=np.uint8))
    output = io.BytesIO()
    image.save(output, format="PNG")
    return output.getvalue()


class TestDecode:
    """Test decoding sources"""

    def test_decode_bytes(self):
        """Test decoding raw bytes"""
        buffer = decode(png_bytes(20, 10))
        assert isinstance(buffer, PillowBuffer)
        assert (buffer.width, buffer.height) == (20, 10)
        assert buffer.format == "PNG"

    def test_decode_path(self, tmp_path):
        """Test decoding a file path"""
        path = tmp_path / "image.png"
        path.write_bytes(png_bytes())
        assert decode(path).format == "PNG"
        assert decode(str(path)).width == 30

    def test_decode_file_object(self):
        """Test decoding an open binary stream"""
        stream = io.BytesIO(png_bytes())
        buffer = decode(stream)
        assert buffer.height == 30
        assert not stream.closed

    def test_decode_error_passes_through(self):
        """Undecodable bytes raise Pillow's error unchanged"""
        with pytest.raises(UnidentifiedImageError):
            decode(b"definitely not an image")

    def test_missing_file_passes_through(self, tmp_path):
        """Missing files raise FileNotFoundError unchanged"""
        with pytest.raises(FileNotFoundError):
            decode(tmp_path / "missing.png")


class TestEncode:
    """Test encoding buffers"""

    def test_encode_keeps_source_format(self):
        """Tiles re-encode in the decoded format"""
        tileset = split_image(png_bytes())
        data = encode(tileset[0].image)
        with Image.open(io.BytesIO(data)) as img:
            assert img.format == "PNG"
            assert img.size == (10, 10)

    def test_encode_explicit_format(self):
        """Test explicit format override"""
        data = encode(decode(png_bytes()), format="jpeg")
        with Image.open(io.BytesIO(data)) as img:
            assert img.format == "JPEG"

    def test_encode_array_buffer_uses_default_format(self):
        """Array buffers fall back to the default format"""
        buffer = ArrayBuffer(np.zeros((4, 4, 3), dtype=np.uint8))
        with Image.open(io.BytesIO(encode(buffer))) as img:
            assert img.format == "PNG"

    def test_encode_error_passes_through(self):
        """Encoder errors reach the caller"""
        buffer = decode(png_bytes(mode="RGBA"))
        with pytest.raises(OSError):
            encode(buffer, format="JPEG")

    def test_extension_for(self):
        """Test format extensions"""
        assert extension_for("PNG") == ".png"
        assert extension_for("jpeg") == ".jpg"
        assert extension_for("tif") == ".tif"

    def test_normalize_format_aliases(self):
        """Extension-style names map to Pillow format names"""
        assert normalize_format("jpg") == "JPEG"
        assert normalize_format(".TIF") == "TIFF"
        assert normalize_format("png") == "PNG"
        assert normalize_format("jpeg") == "JPEG"

    def test_encode_with_extension_alias(self):
        """Aliases such as jpg encode like their format name"""
        data = encode(decode(png_bytes()), format="jpg")
        with Image.open(io.BytesIO(data)) as img:
            assert img.format == "JPEG"

    def test_save_tiles_with_extension_alias(self, tmp_path):
        """Saving with an alias uses the canonical extension"""
        paths = save_tiles(split_image(png_bytes()), tmp_path, format="jpg")
        assert paths[0].name == "tile_000_000.jpg"
        with Image.open(paths[0]) as img:
            assert img.format == "JPEG"


class TestSplitImage:
    """Test path-taking entry points"""

    def test_split_image_returns_nine_tiles(self, tmp_path):
        """split_image matches a 3x3 grid split"""
        path = tmp_path / "image.png"
        path.write_bytes(png_bytes(100, 100))

        tileset = split_image(path)
        expected = split_into_grid(decode(path), 3, 3)

        assert len(tileset) == 9
        assert tileset.rectangles == expected.rectangles
        assert tileset.source_format == "PNG"
        assert tileset.get_tile_by_position(2, 2).size == (34, 34)

    def test_split_image_smallest_image(self):
        """3x3 pixels gives 9 single-pixel tiles"""
        tileset = split_image(png_bytes(3, 3))
        assert len(tileset) == 9
        assert all(tile.size == (1, 1) for tile in tileset)

    def test_split_image_too_small(self):
        """Test images below 3x3"""
        with pytest.raises(DimensionTooSmallError):
            split_image(png_bytes(2, 2))

    def test_split_image_with_size(self):
        """250x100 at 100x100 gives three clipped tiles"""
        tileset = split_image_with_size(png_bytes(250, 100), 100, 100)
        assert [tile.size for tile in tileset] == [(100, 100), (100, 100), (50, 100)]

    def test_split_image_with_size_validates_before_decode(self, tmp_path):
        """Bad tile sizes fail without touching the source"""
        with pytest.raises(InvalidTileSizeError):
            split_image_with_size(tmp_path / "missing.png", 0, 10)

    def test_split_image_with_size_skips_decode_and_planning(self, monkeypatch, caplog):
        """Tile size is rejected before decoding or planning"""
        import image_splitting.api as api

        def fail_decode(source):
            raise AssertionError("decode should not be called")

        monkeypatch.setattr(api, "decode", fail_decode)
        with caplog.at_level("DEBUG", logger="image_splitting"):
            with pytest.raises(InvalidTileSizeError):
                split_image_with_size(b"ignored", 10, -1)
        assert "Planned" not in caplog.text

    def test_reassembly_matches_decoded_source(self):
        """Tiles from bytes rebuild the decoded image"""
        data = png_bytes(47, 31, mode="RGBA")
        tileset = split_image_with_size(data, 16, 16)
        expected = np.asarray(decode(data).image)
        assert np.array_equal(reassemble(tileset).array, expected)


class TestSaveTiles:
    """Test saving tiles and manifests"""

    def test_save_tiles(self, tmp_path):
        """Tiles are written with position-based names"""
        tileset = split_image(png_bytes(30, 30))
        out_dir = tmp_path / "tiles"

        paths = save_tiles(tileset, out_dir, prefix="scene")

        assert len(paths) == 9
        assert paths[0] == out_dir / "scene_000_000.png"
        assert paths[-1] == out_dir / "scene_002_002.png"
        with Image.open(paths[4]) as img:
            assert img.size == (10, 10)
            assert img.format == "PNG"

    def test_save_tiles_default_dir_from_settings(self, tmp_path, monkeypatch):
        """Omitted output directory comes from settings"""
        from image_splitting.common.config import settings

        monkeypatch.setattr(settings, "output_dir", str(tmp_path / "default"))
        paths = save_tiles(split_image(png_bytes()))
        assert all(p.parent == tmp_path / "default" for p in paths)

    def test_save_tiles_pixels_round_trip(self, tmp_path):
        """Saved PNG tiles hold the tile pixels"""
        tileset = split_image_with_size(png_bytes(25, 25), 10, 10)
        paths = save_tiles(tileset, tmp_path)
        for tile, path in zip(tileset, paths):
            with Image.open(path) as img:
                assert np.array_equal(np.asarray(img), tile.image.to_array())

    def test_write_manifest(self, tmp_path):
        """Manifest records bounds and file names"""
        tileset = split_image_with_size(png_bytes(250, 100), 100, 100)
        paths = save_tiles(tileset, tmp_path / "tiles")

        manifest_path = write_manifest(tileset, tmp_path / "manifest.json", paths)

        data = json.loads(manifest_path.read_text())
        assert data['strategy'] == "fixed"
        assert data['source_format'] == "PNG"
        assert data['total_tiles'] == 3
        assert data['tiles'][2]['bounds'] == {'x': 200, 'y': 0, 'width': 50, 'height': 100}
        assert data['tiles'][2]['file'] == "tile_000_002.png"
