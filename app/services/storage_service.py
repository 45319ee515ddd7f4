"""
Object storage access: time-limited signed GET URLs for private S3 objects.
"""
import asyncio
import logging
from typing import Optional

import boto3
from botocore.client import BaseClient
from botocore.exceptions import BotoCoreError, ClientError

from app.config import settings

logger = logging.getLogger(__name__)

_s3_client: Optional[BaseClient] = None


def get_s3_client() -> BaseClient:
    """
    Return the shared S3 client, creating it on first use.
    Explicit credentials are optional; boto3's default chain applies otherwise.
    """
    global _s3_client
    if _s3_client is None:
        kwargs = {}
        if settings.AWS_REGION:
            kwargs["region_name"] = settings.AWS_REGION
        if settings.AWS_ACCESS_KEY_ID and settings.AWS_SECRET_ACCESS_KEY:
            kwargs["aws_access_key_id"] = settings.AWS_ACCESS_KEY_ID
            kwargs["aws_secret_access_key"] = settings.AWS_SECRET_ACCESS_KEY
        _s3_client = boto3.client("s3", **kwargs)
    return _s3_client


async def generate_signed_url(bucket: str, key: str, ttl_seconds: int) -> Optional[str]:
    """
    Generate a presigned GET URL for an object.

    Args:
        bucket: Bucket name
        key: Object key
        ttl_seconds: URL lifetime in seconds

    Returns:
        str: Signed URL, or None if signing failed
    """
    try:
        return await asyncio.to_thread(
            get_s3_client().generate_presigned_url,
            "get_object",
            Params={"Bucket": bucket, "Key": key},
            ExpiresIn=ttl_seconds,
        )
    except (BotoCoreError, ClientError) as e:
        logger.warning(f"Failed to sign URL for s3://{bucket}/{key}: {str(e)}")
        return None
