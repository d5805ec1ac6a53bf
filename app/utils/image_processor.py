import io
import logging
from typing import Tuple

from PIL import Image, ImageOps

logger = logging.getLogger(__name__)

JPEG_QUALITY = 95


# Re-encodes an uploaded image: applies EXIF orientation and drops metadata.
# PNG stays lossless, everything else becomes a high quality JPEG.
def normalize_image(contents: bytes, content_type: str) -> Tuple[bytes, str]:
    with Image.open(io.BytesIO(contents)) as image:
        image = ImageOps.exif_transpose(image)
        out = io.BytesIO()
        if content_type == "image/png":
            image.save(out, format="PNG", compress_level=0)
            return out.getvalue(), "image/png"

        if image.mode != "RGB":
            image = image.convert("RGB")
        image.save(out, format="JPEG", quality=JPEG_QUALITY, subsampling=0, optimize=True)
        return out.getvalue(), "image/jpeg"


# Sniffs the real image type from magic bytes when the client sent a generic type
def sniff_content_type(contents: bytes, declared: str, filename: str = "") -> str:
    content_type = declared or "application/octet-stream"
    if content_type not in ("application/octet-stream", "text/plain", ""):
        return content_type

    header = contents[:12]
    if header.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if header.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if header[0:4] == b"RIFF" and header[8:12] == b"WEBP":
        return "image/webp"

    name = (filename or "").lower()
    if name.endswith((".jpg", ".jpeg")):
        return "image/jpeg"
    if name.endswith(".png"):
        return "image/png"
    if name.endswith(".webp"):
        return "image/webp"
    return "application/octet-stream"
