"""
CDN URL templating for stored images.
Supports Bunny CDN query-parameter optimization, Cloudinary transformation
URLs and plain CloudFront URLs; with no provider configured, callers fall
back to signed storage URLs.
"""
import cloudinary
from urllib.parse import urlencode
from app.config import settings
import logging
from typing import Optional

logger = logging.getLogger(__name__)

BUNNY = "bunny"
CLOUDINARY = "cloudinary"
CLOUDFRONT = "cloudfront"

# Providers that can serve resized variants of an object
RESIZING_PROVIDERS = (BUNNY, CLOUDINARY)

# Configure Cloudinary with credentials from settings
cloudinary.config(
    cloud_name=settings.CLOUDINARY_CLOUD_NAME,
    api_key=settings.CLOUDINARY_API_KEY,
    api_secret=settings.CLOUDINARY_API_SECRET,
    secure=True  # Always use HTTPS for secure URLs
)


def get_cdn_provider() -> Optional[str]:
    """
    Return the active CDN provider name, or None when no CDN is configured.
    """
    provider = (settings.CDN_PROVIDER or "").strip().lower()
    if not provider and settings.CLOUDFRONT_DOMAIN:
        return CLOUDFRONT
    if provider in (BUNNY, CLOUDINARY, CLOUDFRONT):
        return provider
    if provider:
        logger.warning(f"Unknown CDN_PROVIDER {settings.CDN_PROVIDER!r}, CDN disabled")
    return None


def supports_variants(provider: Optional[str]) -> bool:
    return provider in RESIZING_PROVIDERS


def _clean_key(s3_key: str) -> str:
    return s3_key[1:] if s3_key.startswith("/") else s3_key


def get_cdn_url(s3_key: str) -> str:
    """
    Generate the plain CDN URL for a storage key.

    Args:
        s3_key: Object key (path) in the storage bucket

    Returns:
        str: CDN URL without optimization parameters
    """
    provider = get_cdn_provider()
    if provider == CLOUDINARY:
        return cloudinary.CloudinaryImage(_clean_key(s3_key)).build_url(secure=True)
    if provider == CLOUDFRONT:
        return f"https://{settings.CLOUDFRONT_DOMAIN}/{_clean_key(s3_key)}"
    return f"https://{settings.CDN_HOSTNAME}/{_clean_key(s3_key)}"


def get_optimized_url(
    s3_key: str,
    width: Optional[int] = None,
    height: Optional[int] = None,
    quality: Optional[int] = None,
    fetch_format: Optional[str] = None,
    blur: Optional[int] = None,
) -> str:
    """
    Generate an optimized CDN URL for a resized variant of an image.

    Args:
        s3_key: Object key (path) in the storage bucket
        width: Optional target width in pixels
        height: Optional target height in pixels
        quality: Optional quality (1-100)
        fetch_format: Optional output format (webp, jpeg, png, avif)
        blur: Optional blur radius

    Returns:
        str: Optimized CDN URL; CloudFront has no resizing and gets the plain URL
    """
    provider = get_cdn_provider()
    if provider == CLOUDFRONT:
        return get_cdn_url(s3_key)
    if provider == CLOUDINARY:
        transform_params = {}
        if width or height:
            transform_params["crop"] = "fill"
        if width:
            transform_params["width"] = width
        if height:
            transform_params["height"] = height
        if quality:
            transform_params["quality"] = quality
        if fetch_format:
            transform_params["fetch_format"] = fetch_format
        if blur:
            # Cloudinary blur strength ranges 1-2000
            transform_params["effect"] = f"blur:{min(blur * 100, 2000)}"
        return cloudinary.CloudinaryImage(_clean_key(s3_key)).build_url(
            transformation=[transform_params] if transform_params else None,
            secure=True
        )

    params = {}
    if width:
        params["w"] = width
    if height:
        params["h"] = height
    if quality:
        params["q"] = quality
    if fetch_format:
        params["f"] = fetch_format
    if blur:
        params["blur"] = blur

    base_url = get_cdn_url(s3_key)
    return f"{base_url}?{urlencode(params)}" if params else base_url


def validate_cdn_config() -> bool:
    """
    Validate that the configured CDN provider has what it needs.

    Returns:
        bool: True if a CDN is configured and usable, False otherwise
    """
    provider = get_cdn_provider()
    if provider is None:
        return False
    if provider == BUNNY and not settings.CDN_HOSTNAME:
        logger.warning("CDN_HOSTNAME not configured")
        return False
    if provider == CLOUDINARY and not settings.CLOUDINARY_CLOUD_NAME:
        logger.warning("CLOUDINARY_CLOUD_NAME not configured")
        return False
    if provider == CLOUDFRONT and not settings.CLOUDFRONT_DOMAIN:
        logger.warning("CLOUDFRONT_DOMAIN not configured")
        return False

    logger.info(f"CDN configuration validated successfully ({provider})")
    return True
