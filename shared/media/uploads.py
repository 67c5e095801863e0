from fastapi import UploadFile

from shared.errors import ValidationError
from .compression import RawImage, ensure_image_mime


async def read_image_upload(upload: UploadFile | None) -> RawImage | None:
    """Accept filter for a single multipart image field. ``None`` when nothing was sent."""
    if upload is None or not upload.filename:
        return None
    ensure_image_mime(upload.content_type)
    data = await upload.read()
    return RawImage(source_name=upload.filename, data=data, mime_type=upload.content_type)


async def read_image_uploads(
    uploads: list[UploadFile] | None,
    max_count: int,
    field_name: str,
) -> list[RawImage]:
    """Accept filter for a repeated multipart image field, order preserved."""
    uploads = [upload for upload in (uploads or []) if upload.filename]
    if len(uploads) > max_count:
        raise ValidationError(f"{field_name} accepts at most {max_count} files.")
    # Every file is type-checked before any of them is read
    for upload in uploads:
        ensure_image_mime(upload.content_type)
    return [
        RawImage(source_name=upload.filename, data=await upload.read(), mime_type=upload.content_type)
        for upload in uploads
    ]
