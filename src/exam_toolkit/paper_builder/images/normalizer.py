"""
Module: paper_builder.images.normalizer

Purpose:
    Turn an ImageBlock into raster bytes with known dimensions that the
    PDF renderer can embed, and scale images to the space available.

Key Functions:
    - resolve_image(): ImageBlock -> NormalizedImage (or ImageDecodeError)
    - scale_image(): Fit intrinsic dimensions into a width/height cap

Key Classes:
    - NormalizedImage: Ready-to-embed bytes plus intrinsic size
    - ImageDecodeError: Fetch, decode or format failure

Dependencies:
    - PIL: Decoding and JPEG re-encoding
    - requests: Remote image fetch

Used By:
    - paper_builder.images.resolver: Pre-resolution pass
    - paper_builder.layout.blocks: Image block renderer

Policy:
    Embedded bytes (ImageBlock.data or a base64 data: URL) are returned
    unchanged; only their size is read. Every other source is fetched,
    decoded and re-encoded as JPEG (quality 90). Callers treat
    ImageDecodeError as non-fatal.
"""

from __future__ import annotations

import base64
import binascii
import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple
from urllib.parse import unquote, unquote_to_bytes, urlparse

import requests
from PIL import Image

from exam_toolkit.core.models import ImageBlock

logger = logging.getLogger(__name__)

DEFAULT_FETCH_TIMEOUT_S = 10.0
DEFAULT_FETCH_ATTEMPTS = 3
JPEG_QUALITY = 90


class ImageDecodeError(Exception):
    """Image could not be fetched, decoded or re-encoded."""
    pass


@dataclass(frozen=True)
class NormalizedImage:
    """
    Raster image ready for embedding (immutable).

    Attributes:
        data: Encoded image bytes (PNG/JPEG/...)
        width: Intrinsic width in pixels
        height: Intrinsic height in pixels
        format: Pillow format name of data, e.g. "JPEG"
    """

    data: bytes
    width: int
    height: int
    format: str

    @property
    def aspect_ratio(self) -> float:
        """width / height"""
        return self.width / self.height


def resolve_image(
    image: ImageBlock,
    *,
    timeout: float = DEFAULT_FETCH_TIMEOUT_S,
    attempts: int = DEFAULT_FETCH_ATTEMPTS,
    session: Optional[requests.Session] = None,
) -> NormalizedImage:
    """
    Resolve an ImageBlock to embeddable bytes.

    Args:
        image: Image block with data or source
        timeout: Per-request network timeout in seconds
        attempts: Maximum fetch attempts for remote sources
        session: Optional requests session (connection reuse, testing)

    Returns:
        NormalizedImage

    Raises:
        ImageDecodeError: If the image cannot be obtained or decoded

    Example:
        >>> resolved = resolve_image(ImageBlock(data=png_bytes))
        >>> resolved.data is png_bytes
        True
    """
    if image.data is not None:
        return _from_embedded(image.data)

    source = image.source
    if not source:
        raise ImageDecodeError("Image has neither data nor source")

    if source.startswith("data:"):
        return _from_embedded(_decode_data_url(source))

    scheme = urlparse(source).scheme.lower()
    if scheme in ("http", "https"):
        raw = _fetch_remote(source, timeout=timeout, attempts=attempts, session=session)
    elif scheme == "file":
        raw = _read_file(Path(unquote(urlparse(source).path)))
    elif scheme == "" or len(scheme) == 1:
        # Bare paths; a one-letter scheme is a Windows drive letter
        raw = _read_file(Path(source))
    else:
        raise ImageDecodeError(f"Unsupported image source: {source[:60]}")

    return _reencode(raw)


def scale_image(
    width: float,
    height: float,
    max_width: float,
    max_height: float,
) -> Tuple[float, float]:
    """
    Scale intrinsic dimensions to the available space.

    The image first takes the full max_width. If that makes it taller
    than max_height, it is shrunk to max_height instead. Aspect ratio is
    always preserved; images are never cropped or stretched.

    Args:
        width: Intrinsic width
        height: Intrinsic height
        max_width: Available width (mm)
        max_height: Height cap (mm)

    Returns:
        (width, height) in mm

    Example:
        >>> scale_image(400, 200, 150, 50)
        (100.0, 50.0)
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive: {width}x{height}")
    if max_width <= 0 or max_height <= 0:
        raise ValueError(f"Image limits must be positive: {max_width}x{max_height}")

    out_width = float(max_width)
    out_height = height * out_width / width
    if out_height > max_height:
        out_width = width * max_height / height
        out_height = float(max_height)
    return out_width, out_height


def _from_embedded(data: bytes) -> NormalizedImage:
    """Read dimensions of already-encoded bytes without re-encoding."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            width, height = img.size
            fmt = img.format or "PNG"
            img.verify()
    except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as e:
        raise ImageDecodeError(f"Embedded image could not be decoded: {e}") from e

    if width <= 0 or height <= 0:
        raise ImageDecodeError(f"Embedded image has no area: {width}x{height}")
    logger.debug(f"Using embedded {fmt} image {width}x{height}")
    return NormalizedImage(data=data, width=width, height=height, format=fmt)


def _decode_data_url(url: str) -> bytes:
    header, sep, payload = url.partition(",")
    if not sep or not header.startswith("data:image/"):
        raise ImageDecodeError(f"Not an image data URL: {url[:40]}")
    try:
        if header.endswith(";base64"):
            return base64.b64decode(payload, validate=False)
        return unquote_to_bytes(payload)
    except (binascii.Error, ValueError) as e:
        raise ImageDecodeError(f"Malformed data URL: {e}") from e


def _fetch_remote(
    url: str,
    *,
    timeout: float,
    attempts: int,
    session: Optional[requests.Session],
) -> bytes:
    """Fetch bytes over HTTP with a bounded number of attempts."""
    http = session or requests
    last_error: Optional[Exception] = None
    for attempt in range(1, max(1, attempts) + 1):
        try:
            response = http.get(url, timeout=timeout)
            if 400 <= response.status_code < 500:
                # Client errors will not improve on retry
                raise ImageDecodeError(f"HTTP {response.status_code} fetching {url}")
            response.raise_for_status()
            return response.content
        except requests.RequestException as e:
            last_error = e
            logger.warning(f"Image fetch attempt {attempt}/{attempts} failed for {url}: {e}")
    raise ImageDecodeError(f"Could not fetch {url}: {last_error}") from last_error


def _read_file(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as e:
        raise ImageDecodeError(f"Could not read image {path}: {e}") from e


def _reencode(raw: bytes) -> NormalizedImage:
    """Decode arbitrary image bytes and re-encode as JPEG."""
    try:
        with Image.open(io.BytesIO(raw)) as img:
            img.load()
            if img.mode in ("RGBA", "LA") or (img.mode == "P" and "transparency" in img.info):
                rgba = img.convert("RGBA")
                surface = Image.new("RGB", rgba.size, "white")
                surface.paste(rgba, mask=rgba.split()[-1])
            else:
                surface = img.convert("RGB")
    except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as e:
        raise ImageDecodeError(f"Image could not be decoded: {e}") from e

    width, height = surface.size
    if width <= 0 or height <= 0:
        raise ImageDecodeError(f"Image has no area: {width}x{height}")

    buf = io.BytesIO()
    try:
        surface.save(buf, format="JPEG", quality=JPEG_QUALITY)
    except OSError as e:
        raise ImageDecodeError(f"Image could not be re-encoded: {e}") from e

    logger.debug(f"Re-encoded image {width}x{height} as JPEG ({buf.tell()} bytes)")
    return NormalizedImage(data=buf.getvalue(), width=width, height=height, format="JPEG")
