import io

import pytest
from PIL import Image

from shared.errors import ProcessingError, UnsupportedMediaTypeError
from shared.media import RawImage, compress_batch, compress_image, compress_single
from shared.media.compression import LANDSCAPE_FRAME, PORTRAIT_FRAME, frame_for
from tests.conftest import make_image

RED = (220, 20, 20)
GREEN = (20, 200, 20)
BLUE = (20, 20, 220)


def decode(buffer: bytes) -> Image.Image:
    image = Image.open(io.BytesIO(buffer))
    image.load()
    return image


def dominant_channel(pixel) -> int:
    return max(range(3), key=lambda index: pixel[index])


def split_image(size=(200, 100)) -> bytes:
    """Left half red, right half blue."""
    image = Image.new("RGB", size, RED)
    image.paste(Image.new("RGB", (size[0] // 2, size[1]), BLUE), (size[0] // 2, 0))
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def test_landscape_output_is_a_jpeg_in_the_landscape_frame():
    result = compress_single(make_image((300, 300)), "image/png", "square.png")

    image = decode(result.buffer)
    assert image.format == "JPEG"
    assert image.size == LANDSCAPE_FRAME == (1440, 1080)
    assert result.mime_type == "image/jpeg"
    assert result.source_name == "square.png"


def test_testimony_hint_selects_portrait_frame():
    result = compress_single(make_image((300, 300)), "image/png", "face.png", variant_hint="testimony")

    assert decode(result.buffer).size == PORTRAIT_FRAME == (720, 1280)


def test_frame_lookup():
    assert frame_for(None) == LANDSCAPE_FRAME
    assert frame_for("hero") == LANDSCAPE_FRAME
    assert frame_for("Testimony") == PORTRAIT_FRAME


def test_small_images_are_upscaled_to_fill_the_frame():
    result = compress_single(make_image((8, 6)), "image/png", "tiny.png")

    assert decode(result.buffer).size == (1440, 1080)


def test_cover_fit_crops_overflow_instead_of_letterboxing():
    # 2:1 source into a 4:3 frame: the sides are cropped, both halves survive
    image = decode(compress_single(split_image(), "image/png", "split.png").buffer).convert("RGB")

    width, height = image.size
    assert dominant_channel(image.getpixel((40, height // 2))) == 0
    assert dominant_channel(image.getpixel((width - 40, height // 2))) == 2
    # No letterbox bars at the top or bottom
    assert dominant_channel(image.getpixel((40, 2))) == 0
    assert dominant_channel(image.getpixel((width - 40, height - 3))) == 2


def test_any_input_format_is_reencoded_as_jpeg():
    for fmt, mime in (("PNG", "image/png"), ("GIF", "image/gif"), ("BMP", "image/bmp")):
        result = compress_single(make_image(fmt=fmt), mime, f"in.{fmt.lower()}")
        assert decode(result.buffer).format == "JPEG"


def test_non_image_mime_type_is_rejected():
    with pytest.raises(UnsupportedMediaTypeError) as excinfo:
        compress_single(b"%PDF-1.4", "application/pdf", "doc.pdf")

    assert excinfo.value.message == "Only image files are allowed!"
    assert excinfo.value.status_code == 400


def test_corrupt_bytes_raise_processing_error():
    with pytest.raises(ProcessingError):
        compress_single(b"definitely not a png", "image/png", "broken.png")


async def test_async_variant_matches_sync_output_frame():
    result = await compress_image(RawImage("face.png", make_image(), "image/png"), "testimony")

    assert decode(result.buffer).size == (720, 1280)


async def test_batch_preserves_order_within_each_collection():
    heroes = [
        RawImage("hero-red.png", make_image(color=RED), "image/png"),
        RawImage("hero-green.png", make_image(color=GREEN), "image/png"),
    ]
    others = [RawImage("other-blue.png", make_image(color=BLUE), "image/png")]

    batch = await compress_batch(heroes, others)

    assert [image.source_name for image in batch.hero_images] == ["hero-red.png", "hero-green.png"]
    assert [image.source_name for image in batch.other_images] == ["other-blue.png"]
    centers = [
        dominant_channel(decode(image.buffer).convert("RGB").getpixel((720, 540)))
        for image in [*batch.hero_images, *batch.other_images]
    ]
    assert centers == [0, 1, 2]


async def test_empty_batch():
    batch = await compress_batch([], [])

    assert batch.hero_images == []
    assert batch.other_images == []


async def test_one_bad_image_fails_the_whole_batch():
    heroes = [RawImage("ok.png", make_image(), "image/png")]
    others = [RawImage("bad.png", b"garbage", "image/png")]

    with pytest.raises(ProcessingError):
        await compress_batch(heroes, others)


async def test_jpeg_batch_is_reencoded_into_landscape_frames():
    heroes = [
        RawImage("a.jpg", make_image((640, 480), color=RED, fmt="JPEG"), "image/jpeg"),
        RawImage("b.jpg", make_image((480, 640), color=GREEN, fmt="JPEG"), "image/jpeg"),
    ]
    others = [RawImage("c.jpg", make_image((300, 300), color=BLUE, fmt="JPEG"), "image/jpeg")]

    batch = await compress_batch(heroes, others)

    outputs = [*batch.hero_images, *batch.other_images]
    assert [image.source_name for image in outputs] == ["a.jpg", "b.jpg", "c.jpg"]
    for image in outputs:
        decoded = decode(image.buffer)
        assert image.mime_type == "image/jpeg"
        assert decoded.format == "JPEG"
        assert decoded.size == LANDSCAPE_FRAME
    centers = [dominant_channel(decode(image.buffer).convert("RGB").getpixel((720, 540))) for image in outputs]
    assert centers == [0, 1, 2]
