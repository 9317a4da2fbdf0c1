"""Image I/O: OpenCV for decode and truecolor encode, Pillow for indexed PNG."""

import io
import os
import stat
import tempfile
from pathlib import Path
from typing import Optional

import cv2
import numpy as np
from PIL import Image

from utils.errors import DecodeError, EncodeError, OutputWriteError, ValidationError


def decode_image(data: bytes, source: str = "<bytes>") -> np.ndarray:
    """Decode raw file bytes to RGB uint8; any channel count is coerced to 3."""
    buffer = np.frombuffer(data, dtype=np.uint8)
    img = cv2.imdecode(buffer, cv2.IMREAD_COLOR) if buffer.size else None
    if img is None:
        raise DecodeError(f"Failed to load image: {source}")
    return cv2.cvtColor(img, cv2.COLOR_BGR2RGB)


def load_image(path: str) -> np.ndarray:
    """Load image as RGB uint8."""
    try:
        data = Path(path).read_bytes()
    except OSError as exc:
        raise DecodeError(f"Failed to load image: {path} ({exc.strerror or exc})") from exc
    return decode_image(data, source=str(path))


def source_channels(path: str) -> Optional[int]:
    """Channel count of the file as stored, for the progress log."""
    img = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    if img is None:
        return None
    return 1 if img.ndim == 2 else img.shape[2]


def encode_truecolor(
    image: np.ndarray,
    output_format: str,
    jpeg_quality: Optional[int] = None,
    png_compression: int = 9
) -> bytes:
    """Encode an RGB buffer as 24-bit PNG or baseline JPEG."""
    bgr = cv2.cvtColor(np.ascontiguousarray(image, dtype=np.uint8), cv2.COLOR_RGB2BGR)
    if output_format == 'png':
        ext, flags = '.png', [cv2.IMWRITE_PNG_COMPRESSION, int(png_compression)]
    elif output_format == 'jpeg':
        if jpeg_quality is None:
            raise ValidationError("JPEG encoding requires an encoder quality")
        ext, flags = '.jpg', [cv2.IMWRITE_JPEG_QUALITY, int(jpeg_quality)]
    else:
        raise ValidationError(f"Unknown output format: {output_format}")

    try:
        ok, encoded = cv2.imencode(ext, bgr, flags)
    except cv2.error as exc:
        raise EncodeError(f"{output_format.upper()} encode failed: {exc}") from exc
    if not ok:
        raise EncodeError(f"{output_format.upper()} encode failed")
    return encoded.tobytes()


def encode_indexed_png(indexed, png_compression: int = 9) -> bytes:
    """Encode an IndexedBuffer as PNG-8, keeping the palette as given."""
    height, width = indexed.indices.shape
    try:
        img = Image.frombytes('P', (width, height), np.ascontiguousarray(indexed.indices, dtype=np.uint8).tobytes())
        img.putpalette(indexed.palette.flat_rgb(), rawmode='RGB')
        out = io.BytesIO()
        # optimize would let Pillow rewrite the palette
        img.save(out, 'PNG', optimize=False, compress_level=int(png_compression))
    except (OSError, ValueError) as exc:
        raise EncodeError(f"PNG-8 encode failed: {exc}") from exc
    return out.getvalue()


def _output_mode(target: Path) -> int:
    """Keep an existing target's mode, else what a plain open() would create."""
    try:
        return stat.S_IMODE(os.stat(target).st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def write_output(path: str, data: bytes) -> None:
    """Write bytes so that the target is either fully replaced or untouched."""
    target = Path(path)
    directory = target.parent
    tmp_name = None
    try:
        with tempfile.NamedTemporaryFile(
            dir=directory, prefix=f".{target.name}.", suffix='.tmp', delete=False
        ) as tmp:
            tmp_name = tmp.name
            tmp.write(data)
        os.chmod(tmp_name, _output_mode(target))
        os.replace(tmp_name, target)
    except OSError as exc:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise OutputWriteError(path, exc.strerror or exc) from exc
