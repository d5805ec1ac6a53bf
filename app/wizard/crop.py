"""Cropping of captured document images.

The crop rectangle comes from a preview that is usually shown smaller than
the real image, so it is scaled into natural pixel space before cutting:

    scale_x = natural_width / displayed_width
    scale_y = natural_height / displayed_height

The output is always ``round(w * scale_x) x round(h * scale_y)`` pixels. A
rotation (multiple of 90 degrees) turns the picture around the centre of
the crop before it is cut out; it never changes the output size.
"""
import io
import math
import logging
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from PIL import Image, ImageOps, UnidentifiedImageError

from app.wizard.errors import CropNotConfirmedError, ImageDecodeError

logger = logging.getLogger(__name__)

JPEG_QUALITY = 95
CROPPED_FILENAME = "cropped.jpg"
CROPPED_CONTENT_TYPE = "image/jpeg"

Size = Tuple[int, int]


@dataclass(frozen=True)
class CropRegion:
    x: float
    y: float
    width: float
    height: float

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError("Crop region must have a positive width and height")


@dataclass(frozen=True)
class CroppedImage:
    data: bytes
    width: int
    height: int
    filename: str = CROPPED_FILENAME
    content_type: str = CROPPED_CONTENT_TYPE


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def normalize_rotation(angle: int) -> int:
    if angle % 90:
        raise ValueError(f"Rotation must be a multiple of 90 degrees, got {angle}")
    return angle % 360


def scale_region(region: CropRegion, natural_size: Size, displayed_size: Size) -> Tuple[int, int, int, int]:
    """Map a displayed-space region to (left, top, width, height) in natural pixels."""
    natural_w, natural_h = natural_size
    displayed_w, displayed_h = displayed_size
    if displayed_w <= 0 or displayed_h <= 0:
        raise ValueError("Displayed size must be positive")

    scale_x = natural_w / displayed_w
    scale_y = natural_h / displayed_h
    return (
        _round_half_up(region.x * scale_x),
        _round_half_up(region.y * scale_y),
        max(1, _round_half_up(region.width * scale_x)),
        max(1, _round_half_up(region.height * scale_y)),
    )


def _open_image(source: Union[bytes, Image.Image]) -> Image.Image:
    if isinstance(source, Image.Image):
        return source
    try:
        image = Image.open(io.BytesIO(source))
        image.load()
    except (UnidentifiedImageError, OSError) as e:
        raise ImageDecodeError(f"Could not read image: {e}") from e
    # Previews are shown upright, so coordinates refer to the oriented image
    return ImageOps.exif_transpose(image)


def crop_image(
    source: Union[bytes, Image.Image],
    region: CropRegion,
    displayed_size: Optional[Size] = None,
    rotation: int = 0,
    quality: int = JPEG_QUALITY,
) -> CroppedImage:
    if not 90 <= quality <= 95:
        raise ValueError("JPEG quality must be between 90 and 95")

    image = _open_image(source)
    natural_size = image.size
    left, top, width, height = scale_region(region, natural_size, displayed_size or natural_size)
    rotation = normalize_rotation(rotation)

    if image.mode != "RGB":
        image = image.convert("RGB")

    if rotation:
        # PIL turns counter-clockwise, the preview turns clockwise
        centre = (left + width / 2, top + height / 2)
        image = image.rotate(-rotation, resample=Image.BICUBIC, center=centre, fillcolor=(0, 0, 0))

    cropped = image.crop((left, top, left + width, top + height))
    out = io.BytesIO()
    cropped.save(out, format="JPEG", quality=quality)
    logger.debug(f"Cropped {natural_size} -> {cropped.size} (rotation={rotation})")
    return CroppedImage(data=out.getvalue(), width=cropped.width, height=cropped.height)


class CropSession:
    """One crop interaction: a selected file, a chosen region and a rotation."""

    def __init__(self, source: bytes, displayed_size: Optional[Size] = None, filename: Optional[str] = None):
        self._image = _open_image(source)
        self.filename = filename
        self.natural_size: Size = self._image.size
        self.displayed_size: Size = displayed_size or self.natural_size
        self.region: Optional[CropRegion] = None
        self.rotation = 0

    def set_region(self, x: float, y: float, width: float, height: float) -> CropRegion:
        self.region = CropRegion(x, y, width, height)
        return self.region

    def rotate_left(self) -> int:
        self.rotation = normalize_rotation(self.rotation - 90)
        return self.rotation

    def rotate_right(self) -> int:
        self.rotation = normalize_rotation(self.rotation + 90)
        return self.rotation

    def render(self) -> CroppedImage:
        if self.region is None:
            raise CropNotConfirmedError()
        return crop_image(self._image, self.region, self.displayed_size, self.rotation)
