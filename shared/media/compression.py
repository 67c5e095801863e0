"""
Image normalisation for catalog uploads.

Every accepted upload is cover-fitted to a fixed frame and re-encoded as a
quality-50 JPEG before it reaches object storage, whatever format it came in.
"""
import asyncio
import io
from dataclasses import dataclass, field

import structlog
from PIL import Image, ImageOps, UnidentifiedImageError

from shared.config import settings
from shared.errors import ProcessingError, UnsupportedMediaTypeError
from shared.observability import ecomm_images_processed_total

logger = structlog.get_logger(__name__)

OUTPUT_FORMAT = "JPEG"
OUTPUT_MIME_TYPE = "image/jpeg"
JPEG_QUALITY = 50

LANDSCAPE_FRAME = (1440, 1080)
PORTRAIT_FRAME = (720, 1280)


# Upload paths whose images are shown in a tall card rather than a banner
PORTRAIT_HINTS = frozenset({"testimony"})


@dataclass(frozen=True)
class RawImage:
    source_name: str
    data: bytes
    mime_type: str


@dataclass(frozen=True)
class CompressedImage:
    source_name: str
    buffer: bytes
    mime_type: str = OUTPUT_MIME_TYPE


@dataclass(frozen=True)
class CompressedBatch:
    hero_images: list[CompressedImage] = field(default_factory=list)
    other_images: list[CompressedImage] = field(default_factory=list)


def ensure_image_mime(mime_type: str | None):
    if not mime_type or not mime_type.lower().startswith("image/"):
        ecomm_images_processed_total.labels(outcome="rejected").inc()
        raise UnsupportedMediaTypeError()


def frame_for(variant_hint: str | None) -> tuple[int, int]:
    if variant_hint and variant_hint.lower() in PORTRAIT_HINTS:
        return PORTRAIT_FRAME
    return LANDSCAPE_FRAME


def compress_single(
    raw: bytes,
    mime_type: str,
    source_name: str,
    variant_hint: str | None = None,
) -> CompressedImage:
    """Cover-fit ``raw`` into the frame picked by ``variant_hint`` and re-encode it."""
    ensure_image_mime(mime_type)
    width, height = frame_for(variant_hint)

    try:
        with Image.open(io.BytesIO(raw)) as image:
            # Crop the overflow instead of letterboxing
            fitted = ImageOps.fit(
                image.convert("RGB"),
                (width, height),
                method=Image.Resampling.LANCZOS,
                centering=(0.5, 0.5),
            )
        out = io.BytesIO()
        fitted.save(out, format=OUTPUT_FORMAT, quality=JPEG_QUALITY)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
        ecomm_images_processed_total.labels(outcome="failed").inc()
        logger.error("image_processing_failed", source_name=source_name, error=repr(exc))
        raise ProcessingError("Image processing failed") from exc

    ecomm_images_processed_total.labels(outcome="compressed").inc()
    return CompressedImage(source_name=source_name, buffer=out.getvalue())


async def compress_single_async(
    raw: bytes,
    mime_type: str,
    source_name: str,
    variant_hint: str | None = None,
) -> CompressedImage:
    # Rejected before a worker thread is ever involved
    ensure_image_mime(mime_type)
    try:
        return await asyncio.wait_for(
            asyncio.to_thread(compress_single, raw, mime_type, source_name, variant_hint),
            timeout=settings.IMAGE_PROCESSING_TIMEOUT_SECONDS,
        )
    except asyncio.TimeoutError as exc:
        ecomm_images_processed_total.labels(outcome="failed").inc()
        logger.error("image_processing_timed_out", source_name=source_name)
        raise ProcessingError("Image processing failed") from exc


async def compress_image(image: RawImage, variant_hint: str | None = None) -> CompressedImage:
    return await compress_single_async(image.data, image.mime_type, image.source_name, variant_hint)


async def compress_batch(
    hero_images: list[RawImage],
    other_images: list[RawImage],
) -> CompressedBatch:
    """
    Compress both collections concurrently in the landscape frame.

    Output order mirrors input order. The first failure fails the whole batch;
    nothing that was already compressed is returned.
    """
    hero_count = len(hero_images)
    results = await asyncio.gather(
        *(compress_image(image) for image in [*hero_images, *other_images])
    )
    return CompressedBatch(
        hero_images=list(results[:hero_count]),
        other_images=list(results[hero_count:]),
    )
