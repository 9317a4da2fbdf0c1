"""Tests for the compression pipeline and format dispatch."""

import io

import numpy as np
import pytest
from PIL import Image

import engines.pipeline as pipeline
from engines.palette import build_indexed
from engines.pipeline import (
    compress_file,
    compress_image,
    jpeg_encoder_quality,
    output_format_for,
    perceptual_png,
    prepare_jpeg,
)
from engines.tier_selector import select_quality_parameters
from utils.errors import DecodeError, EncodeError, OutputWriteError, ValidationError
from utils.image_io import decode_image, encode_truecolor, write_output
from utils.test_images import generate_gradient, generate_photographic, generate_solid


def _write_png(path, image):
    write_output(str(path), encode_truecolor(image, 'png'))
    return str(path)


@pytest.mark.parametrize("path, expected", [
    ("out.png", "png"),
    ("OUT.PNG", "png"),
    ("a/b/c.jpg", "jpeg"),
    ("photo.JPEG", "jpeg"),
])
def test_output_format_for(path, expected):
    """Extension picks the pipeline, case-insensitively."""
    assert output_format_for(path) == expected


@pytest.mark.parametrize("path", ["out.gif", "out.webp", "out", "png"])
def test_unsupported_extension_rejected(path):
    """Anything but png/jpg/jpeg is a validation error."""
    with pytest.raises(ValidationError):
        output_format_for(path)


@pytest.mark.parametrize("quality, expected", [(0.9, 90), (0.0, 50), (1.0, 95), (0.5, 72)])
def test_jpeg_encoder_quality(quality, expected):
    """Quality maps onto the encoder's 50..95 range."""
    assert jpeg_encoder_quality(quality) == expected


def test_solid_black_high_quality_is_single_entry_palette():
    """4x4 black at quality 1.0 -> indexed PNG with one entry (0, 0, 0, 255)."""
    black = generate_solid(4, 4, (0, 0, 0))
    result = compress_image(black, 'png', 1.0)
    assert result.indexed
    assert result.palette_size == 1
    assert build_indexed(result.pixels).palette.rgba() == [(0, 0, 0, 255)]

    decoded = Image.open(io.BytesIO(result.data))
    assert decoded.mode == 'P'
    assert decoded.size == (4, 4)
    assert decoded.getpalette()[:3] == [0, 0, 0]


def test_solid_black_lowest_quality_still_single_color():
    """Degenerate quality=0.0 keeps a flat image flat."""
    result = compress_image(generate_solid(4, 4, (0, 0, 0)), 'png', 0.0)
    assert result.indexed
    assert result.palette_size == 1
    assert result.params.tier == 2


def test_photo_to_jpeg_encoder_quality():
    """100x100 photographic buffer: 0.9 -> 90, 0.0 -> 50."""
    photo = generate_photographic(100, 100)
    high = compress_image(photo, 'jpeg', 0.9)
    low = compress_image(photo, 'jpeg', 0.0)
    assert high.jpeg_quality == 90
    assert low.jpeg_quality == 50
    assert high.params is None
    assert decode_image(high.data).shape == (100, 100, 3)
    assert len(low.data) < len(high.data)


def test_prepare_jpeg_passthrough_above_threshold():
    """Above quality 0.6 the buffer is not touched."""
    photo = generate_photographic(32, 32)
    assert np.array_equal(prepare_jpeg(photo, 0.61), photo)


def test_prepare_jpeg_smooths_chroma_only():
    """At quality <= 0.6 the pre-blur changes colors but leaves grays alone."""
    gray = generate_solid(8, 8, (90, 90, 90))
    assert np.array_equal(prepare_jpeg(gray, 0.3), gray)
    photo = generate_photographic(32, 32)
    assert not np.array_equal(prepare_jpeg(photo, 0.6), photo)


def test_perceptual_png_output_grid():
    """Final buffer is uint8 on the RGB rounding grid."""
    photo = generate_photographic(40, 30)
    for quality in (0.95, 0.5, 0.2):
        params = select_quality_parameters(quality)
        out = perceptual_png(photo, params)
        assert out.shape == photo.shape
        assert out.dtype == np.uint8
        m = params.rgb_round_multiple
        assert np.all((out % m == 0) | (out == 255))


def test_lower_quality_reduces_colors():
    """Coarser parameters leave fewer distinct colors."""
    photo = generate_photographic(64, 64)

    def n_colors(q):
        out = perceptual_png(photo, select_quality_parameters(q))
        return len(np.unique(out.reshape(-1, 3), axis=0))

    assert n_colors(0.0) <= n_colors(0.5) <= n_colors(1.0)


def test_many_colors_fall_to_truecolor():
    """A noisy photo at quality 1.0 keeps > 256 colors and is written as PNG-24."""
    result = compress_image(generate_photographic(100, 100), 'png', 1.0)
    assert not result.indexed
    assert result.palette_size is None
    assert np.array_equal(decode_image(result.data), result.pixels)


def test_indexed_failure_falls_back_to_truecolor(monkeypatch):
    """Failed PNG-8 encode re-targets the encoder without re-running the pipeline."""
    calls = []

    def broken(indexed, png_compression=9):
        raise EncodeError("PNG-8 encode failed: boom")

    original = pipeline.perceptual_png

    def counting(*args, **kwargs):
        calls.append(1)
        return original(*args, **kwargs)

    monkeypatch.setattr(pipeline, 'encode_indexed_png', broken)
    monkeypatch.setattr(pipeline, 'perceptual_png', counting)

    result = compress_image(generate_solid(6, 6, (10, 200, 30)), 'png', 0.8)
    assert result.fallback_used
    assert not result.indexed
    assert result.palette_size == len(np.unique(result.pixels.reshape(-1, 3), axis=0))
    assert len(calls) == 1
    assert np.array_equal(decode_image(result.data), result.pixels)


def test_second_encode_failure_is_fatal(monkeypatch):
    """If truecolor also fails the error propagates."""
    def broken(*args, **kwargs):
        raise EncodeError("encode failed")

    monkeypatch.setattr(pipeline, 'encode_indexed_png', broken)
    monkeypatch.setattr(pipeline, 'encode_truecolor', broken)
    with pytest.raises(EncodeError):
        compress_image(generate_solid(4, 4), 'png', 1.0)


def test_compress_image_coerces_channels():
    """Gray and RGBA buffers are treated as RGB."""
    gray = np.full((5, 5), 77, dtype=np.uint8)
    rgba = np.dstack([generate_solid(5, 5, (1, 2, 3)), np.full((5, 5), 9, dtype=np.uint8)])
    assert compress_image(gray, 'png', 0.9).pixels.shape == (5, 5, 3)
    assert compress_image(rgba, 'jpeg', 0.9).pixels.shape == (5, 5, 3)


@pytest.mark.parametrize("shape", [(0, 5, 3), (5, 0, 3), (0, 0)])
def test_empty_buffer_rejected(shape):
    """Zero-size buffers fail validation before any stage runs."""
    with pytest.raises(ValidationError):
        compress_image(np.zeros(shape, dtype=np.uint8), 'png', 0.5)


def test_compress_file_png(tmp_path):
    """File in, indexed PNG out, with sizes recorded."""
    src = _write_png(tmp_path / "in.png", generate_gradient(64))
    out = tmp_path / "out.png"
    result = compress_file(src, str(out), 0.3)
    assert out.exists()
    assert out.read_bytes() == result.data
    assert result.input_size == (tmp_path / "in.png").stat().st_size
    assert set(result.timings_ms) >= {'decode', 'perceptual', 'encode', 'write'}
    assert not list(tmp_path.glob("*.tmp"))


def test_compress_file_jpeg_with_metrics(tmp_path):
    """JPEG output with PSNR/SSIM reporting."""
    src = _write_png(tmp_path / "in.png", generate_photographic(100, 100))
    out = tmp_path / "out.jpg"
    result = compress_file(src, str(out), 0.9, report_metrics=True)
    assert result.jpeg_quality == 90
    assert result.psnr_rgb > 20.0
    assert 0.0 < result.ssim_rgb <= 1.0


@pytest.mark.parametrize("quality", [-0.1, 1.1, float('nan')])
def test_invalid_quality_writes_nothing(tmp_path, quality):
    """Bad quality is rejected before decoding; no output appears."""
    out = tmp_path / "out.png"
    with pytest.raises(ValidationError):
        compress_file(str(tmp_path / "does-not-exist.png"), str(out), quality)
    assert not out.exists()


def test_bad_extension_rejected_before_decode(tmp_path):
    """Extension check precedes reading the input."""
    with pytest.raises(ValidationError):
        compress_file(str(tmp_path / "missing.png"), str(tmp_path / "out.bmp"), 0.5)


def test_corrupt_input_is_decode_error(tmp_path):
    """Unreadable input aborts and leaves an existing output untouched."""
    bad = tmp_path / "bad.png"
    bad.write_bytes(b"definitely not an image")
    out = tmp_path / "out.png"
    out.write_bytes(b"previous")
    with pytest.raises(DecodeError):
        compress_file(str(bad), str(out), 0.5)
    assert out.read_bytes() == b"previous"


def test_missing_input_is_decode_error(tmp_path):
    """Nonexistent input is reported as a decode failure."""
    out = tmp_path / "out.jpg"
    with pytest.raises(DecodeError):
        compress_file(str(tmp_path / "nope.png"), str(out), 0.5)
    assert not out.exists()


def test_unwritable_output_is_write_error(tmp_path):
    """Write failure names the target path and leaves nothing behind."""
    src = _write_png(tmp_path / "in.png", generate_solid(4, 4))
    out = tmp_path / "no-such-dir" / "out.png"
    with pytest.raises(OutputWriteError) as excinfo:
        compress_file(src, str(out), 0.5)
    assert str(out) in str(excinfo.value)
    assert isinstance(excinfo.value, OSError)
    assert not out.exists()
