import io

import pytest
from PIL import Image

from app.wizard.crop import (
    CropRegion,
    CropSession,
    crop_image,
    normalize_rotation,
    scale_region,
)
from app.wizard.errors import CropNotConfirmedError, ImageDecodeError


def _two_tone(size, split="vertical"):
    w, h = size
    image = Image.new("RGB", size, (255, 0, 0))
    if split == "vertical":
        image.paste((0, 0, 255), (w // 2, 0, w, h))
    else:
        image.paste((0, 0, 255), (0, h // 2, w, h))
    out = io.BytesIO()
    image.save(out, format="PNG")
    return out.getvalue()


def _pixel(cropped, xy):
    with Image.open(io.BytesIO(cropped.data)) as image:
        return image.convert("RGB").getpixel(xy)


def test_output_size_scales_from_displayed_to_natural(jpeg_factory):
    source = jpeg_factory(400, 300)

    cropped = crop_image(source, CropRegion(10, 20, 50, 40), displayed_size=(200, 150))

    assert (cropped.width, cropped.height) == (100, 80)
    assert cropped.data[:3] == b"\xff\xd8\xff"
    assert cropped.filename == "cropped.jpg"
    assert cropped.content_type == "image/jpeg"


def test_scale_is_independent_per_axis():
    assert scale_region(CropRegion(0, 0, 75, 10), (400, 300), (300, 100)) == (0, 0, 100, 30)


def test_scaled_values_round_half_up():
    # 5 * 1.5 = 7.5 and 3 * 1.5 = 4.5
    assert scale_region(CropRegion(3, 3, 5, 3), (300, 300), (200, 200)) == (5, 5, 8, 5)


def test_without_displayed_size_region_is_in_natural_pixels(jpeg_factory):
    cropped = crop_image(jpeg_factory(120, 90), CropRegion(0, 0, 60, 30))
    assert (cropped.width, cropped.height) == (60, 30)


@pytest.mark.parametrize("rotation", [90, 180, 270, -90])
def test_rotation_keeps_output_size(jpeg_factory, rotation):
    cropped = crop_image(jpeg_factory(200, 100), CropRegion(20, 10, 80, 40), rotation=rotation)
    assert (cropped.width, cropped.height) == (80, 40)


def test_half_turn_swaps_left_and_right():
    source = _two_tone((100, 100), "vertical")

    cropped = crop_image(source, CropRegion(0, 0, 100, 100), rotation=180)

    r, _, b = _pixel(cropped, (10, 50))
    assert b > r


def test_quarter_turn_is_clockwise():
    # Bottom half is blue; a clockwise turn brings it to the left edge
    source = _two_tone((100, 100), "horizontal")

    cropped = crop_image(source, CropRegion(0, 0, 100, 100), rotation=90)

    r, _, b = _pixel(cropped, (10, 50))
    assert b > r


def test_rotation_must_be_multiple_of_ninety():
    assert normalize_rotation(-90) == 270
    assert normalize_rotation(450) == 90
    with pytest.raises(ValueError):
        normalize_rotation(45)


def test_quality_outside_allowed_range(jpeg_factory):
    with pytest.raises(ValueError):
        crop_image(jpeg_factory(), CropRegion(0, 0, 10, 10), quality=80)


def test_region_needs_positive_size():
    with pytest.raises(ValueError):
        CropRegion(0, 0, 0, 10)


def test_unreadable_bytes():
    with pytest.raises(ImageDecodeError):
        CropSession(b"definitely not an image")


def test_session_render_without_region(jpeg_bytes):
    session = CropSession(jpeg_bytes, displayed_size=(200, 150))
    with pytest.raises(CropNotConfirmedError) as exc:
        session.render()
    assert exc.value.message == "Crop image first"


def test_session_rotation_buttons(jpeg_bytes):
    session = CropSession(jpeg_bytes)
    assert session.rotate_left() == 270
    assert session.rotate_right() == 0
    for _ in range(4):
        session.rotate_right()
    assert session.rotation == 0


def test_session_render(jpeg_factory):
    session = CropSession(jpeg_factory(800, 600), displayed_size=(400, 300))
    session.set_region(0, 0, 100, 50)
    session.rotate_right()

    cropped = session.render()

    assert (cropped.width, cropped.height) == (200, 100)
