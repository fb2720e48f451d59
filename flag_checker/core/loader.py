"""Decode an image file or buffer into a Raster.

JPEG, PNG and WEBP are decoded by Pillow. SVG is rasterised by CairoSVG at a
fixed density (300 DPI by default) so thin details such as the spokes survive.
Transparent pixels are composited onto white.
"""

import io
import logging
import os
from pathlib import Path

from PIL import Image

from flag_checker.core.errors import DecodeError
from flag_checker.core.types import Raster

logger = logging.getLogger(__name__)

# Extension -> canonical format name
SUPPORTED_FORMATS: dict[str, str] = {
    'jpg': 'JPEG',
    'jpeg': 'JPEG',
    'png': 'PNG',
    'webp': 'WEBP',
    'svg': 'SVG',
}

# CairoSVG renders at 96 px per inch
CSS_DPI = 96


def _normalise_format(fmt: str | None) -> str | None:
    if not fmt:
        return None
    key = fmt.lower().lstrip('.')
    if key.startswith('image/'):
        key = key[len('image/') :].split('+')[0]
    if key not in SUPPORTED_FORMATS:
        raise DecodeError(f'Unsupported format: {fmt}. Supported: jpeg, jpg, png, svg, webp')
    return SUPPORTED_FORMATS[key]


def _sniff_svg(data: bytes) -> bool:
    head = data[:1024].lstrip().lower()
    return head.startswith(b'<?xml') or head.startswith(b'<svg') or b'<svg' in head


def _flatten(image: Image.Image) -> Image.Image:
    """Convert to RGB, compositing any alpha channel onto white."""
    if image.mode in ('RGBA', 'LA') or (image.mode == 'P' and 'transparency' in image.info):
        rgba = image.convert('RGBA')
        background = Image.new('RGBA', rgba.size, (255, 255, 255, 255))
        return Image.alpha_composite(background, rgba).convert('RGB')
    return image.convert('RGB')


def _decode_bitmap(data: bytes) -> Image.Image:
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as e:
        raise DecodeError(f'Cannot decode image: {e}') from e
    return _flatten(image)


def _rasterise_svg(data: bytes, dpi: int) -> Image.Image:
    try:
        import cairosvg
    except (ImportError, OSError) as e:
        # cairocffi raises OSError when the system cairo library is missing
        raise DecodeError(f'SVG support unavailable: {e}') from e

    try:
        png = cairosvg.svg2png(bytestring=data, dpi=dpi, scale=dpi / CSS_DPI)
    except (OSError, ValueError, SyntaxError) as e:
        raise DecodeError(f'Cannot rasterise SVG: {e}') from e
    return _decode_bitmap(png)


def load_raster(source: str | os.PathLike | bytes, fmt: str | None = None, svg_dpi: int = 300) -> Raster:
    """Load a path or an in-memory buffer into a Raster.

    The format comes from `fmt` if given, else the file extension, else the
    buffer contents. Raises DecodeError for anything that is not a readable
    JPEG, PNG, WEBP or SVG.
    """
    declared = _normalise_format(fmt)

    if isinstance(source, (bytes, bytearray)):
        data = bytes(source)
    else:
        path = Path(source)
        if declared is None and path.suffix:
            declared = _normalise_format(path.suffix)
        try:
            data = path.read_bytes()
        except OSError as e:
            raise DecodeError(f'Cannot read {path}: {e}') from e

    if not data:
        raise DecodeError('Empty image data')

    if declared == 'SVG' or (declared is None and _sniff_svg(data)):
        image = _rasterise_svg(data, svg_dpi)
    else:
        image = _decode_bitmap(data)

    logger.debug('decoded %s image %dx%d', declared or 'sniffed', image.width, image.height)
    return Raster.from_image(image)
