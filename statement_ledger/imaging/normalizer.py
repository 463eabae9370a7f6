"""Page image normalization before image-based extraction.

Greyscale plus a contrast boost make faint scanned print easier for the
model to read; JPEG re-encoding keeps the request payload small.
"""

import base64
import io
from dataclasses import dataclass

from PIL import Image, ImageEnhance, ImageOps

from statement_ledger.imaging.exceptions import ImageNormalizationError

JPEG_MIME_TYPE = "image/jpeg"


@dataclass(frozen=True)
class PreparedImage:
    jpeg_bytes: bytes
    base64_str: str
    width: int
    height: int
    mime_type: str = JPEG_MIME_TYPE

    @property
    def data_uri(self) -> str:
        return f"data:{self.mime_type};base64,{self.base64_str}"


def normalize_page_image(
    raster_bytes: bytes,
    contrast_factor: float = 1.4,
    quality: int = 90,
) -> PreparedImage:
    """Greyscale, contrast-enhance and JPEG re-encode one page raster.

    Raises:
        ImageNormalizationError: if the bytes are not a decodable image.
    """
    try:
        img = Image.open(io.BytesIO(raster_bytes))
        img.load()
    except Exception as exc:
        raise ImageNormalizationError(f"Cannot decode page image: {exc}") from exc

    try:
        img = ImageOps.grayscale(img)
        img = ImageEnhance.Contrast(img).enhance(contrast_factor)
        buf = io.BytesIO()
        img.save(buf, format="JPEG", quality=quality)
    except Exception as exc:
        raise ImageNormalizationError(f"Cannot re-encode page image: {exc}") from exc

    jpeg_bytes = buf.getvalue()
    return PreparedImage(
        jpeg_bytes=jpeg_bytes,
        base64_str=base64.b64encode(jpeg_bytes).decode("ascii"),
        width=img.width,
        height=img.height,
    )
