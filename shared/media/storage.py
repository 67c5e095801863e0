"""
Object storage for compressed images: S3 for the bytes, CloudFront in front.

Uploads are part of the request outcome and fail loudly. Deletes and cache
invalidations are best-effort and only ever report True/False.
"""
import asyncio
import time
from datetime import datetime, timezone
from functools import lru_cache

import boto3
import structlog
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from shared.config import settings
from shared.errors import ProcessingError
from .compression import CompressedImage

logger = structlog.get_logger(__name__)


def object_key(prefix: str, now: datetime | None = None) -> str:
    """``product/Mug/hero-0`` -> ``product/Mug/hero-0_2024-05-01T10-20-30-123Z``"""
    now = now or datetime.now(timezone.utc)
    stamp = now.strftime("%Y-%m-%dT%H-%M-%S-") + f"{now.microsecond // 1000:03d}Z"
    return f"{prefix}_{stamp}"


class ObjectStore:
    def __init__(self, bucket_name: str, distribution_id: str, s3_client, cloudfront_client):
        self.bucket_name = bucket_name
        self.distribution_id = distribution_id
        self._s3 = s3_client
        self._cloudfront = cloudfront_client

    async def upload(self, key_prefix: str, image: CompressedImage) -> str:
        key = object_key(key_prefix)
        try:
            await asyncio.to_thread(
                self._s3.put_object,
                Bucket=self.bucket_name,
                Key=key,
                Body=image.buffer,
                ContentType=image.mime_type,
            )
        except (BotoCoreError, ClientError) as exc:
            logger.error("object_upload_failed", key=key, error=repr(exc))
            raise ProcessingError() from exc
        logger.info("object_uploaded", key=key, size=len(image.buffer))
        return key

    async def delete(self, image_key: str) -> bool:
        try:
            await asyncio.to_thread(self._s3.delete_object, Bucket=self.bucket_name, Key=image_key)
        except (BotoCoreError, ClientError) as exc:
            logger.warning("object_delete_failed", key=image_key, error=repr(exc))
            return False
        return True

    async def invalidate(self, image_key: str) -> bool:
        try:
            await asyncio.to_thread(
                self._cloudfront.create_invalidation,
                DistributionId=self.distribution_id,
                InvalidationBatch={
                    "CallerReference": f"{time.time_ns()}",  # must be unique
                    "Paths": {"Quantity": 1, "Items": [f"/{image_key}"]},
                },
            )
        except (BotoCoreError, ClientError) as exc:
            logger.warning("cdn_invalidation_failed", key=image_key, error=repr(exc))
            return False
        return True

    async def discard(self, image_key: str) -> bool:
        """Delete the object and drop it from the CDN. True only if both succeeded."""
        deleted = await self.delete(image_key)
        invalidated = await self.invalidate(image_key)
        return deleted and invalidated


def build_object_store() -> ObjectStore:
    if not settings.AWS_ACCESS_KEY_ID:
        logger.warning("missing_aws_keys")

    client_config = Config(
        connect_timeout=settings.STORAGE_TIMEOUT_SECONDS,
        read_timeout=settings.STORAGE_TIMEOUT_SECONDS,
        retries={"total_max_attempts": 1},
    )
    session = boto3.session.Session(
        aws_access_key_id=settings.AWS_ACCESS_KEY_ID or None,
        aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY or None,
        region_name=settings.AWS_REGION,
    )
    return ObjectStore(
        bucket_name=settings.AWS_BUCKET_NAME,
        distribution_id=settings.AWS_DISTRIBUTION_ID,
        s3_client=session.client("s3", config=client_config),
        cloudfront_client=session.client("cloudfront", config=client_config),
    )


@lru_cache
def get_object_store() -> ObjectStore:
    """FastAPI dependency. Clients are created once per process."""
    return build_object_store()


def discard_uploads(hooks, store: ObjectStore, image_keys) -> None:
    """Schedule best-effort cleanup for keys whose owning row was never written."""
    for key in image_keys:
        if key:
            hooks.submit("image_discard", store.discard, key)
