from .compression import (
    CompressedBatch,
    CompressedImage,
    RawImage,
    compress_batch,
    compress_image,
    compress_single,
    compress_single_async,
    ensure_image_mime,
)
from .storage import ObjectStore, discard_uploads, get_object_store
from .uploads import read_image_upload, read_image_uploads

__all__ = [
    "CompressedBatch",
    "CompressedImage",
    "RawImage",
    "compress_batch",
    "compress_image",
    "compress_single",
    "compress_single_async",
    "ensure_image_mime",
    "ObjectStore",
    "discard_uploads",
    "get_object_store",
    "read_image_upload",
    "read_image_uploads",
]
