"""
Cloudinary delivery and upload helpers.

Portfolio images live in object storage; they are delivered through
Cloudinary, which resizes and compresses them on first request. A storage
URL is rewritten into an "upload" mode URL when its object key can be read
from the path, and wrapped into a "fetch" mode URL otherwise.
"""
import re
import cloudinary
import cloudinary.uploader
from enum import Enum
from functools import lru_cache
from typing import Dict, Iterable, Optional, Union
from urllib.parse import quote, unquote, urlsplit
from pydantic import BaseModel
from fastapi import HTTPException, status
from app.config import get_settings
import logging

logger = logging.getLogger(__name__)

CLOUDINARY_HOST = "https://res.cloudinary.com"
SUPPORTED_SCHEMES = ("http", "https")
RESPONSIVE_WIDTHS = (400, 800, 1200, 1600, 2000)

# Characters encodeURIComponent leaves alone
_URI_COMPONENT_SAFE = "-_.!~*'()"

class CloudinaryPreset(str, Enum):
    THUMBNAIL = 'w_400,c_limit,q_auto:good'
    GALLERY = 'w_1200,c_limit,q_auto:good'
    MEDIUM = 'w_800,c_limit,q_auto:good'
    FULL = 'q_auto:good'
    WATERMARK = 'w_1200,c_limit,q_auto:good,l_watermark,o_50,g_south_east'
    SOCIAL = 'w_1200,h_630,c_fill,g_auto,q_auto:good'
    BLUR_PLACEHOLDER = 'w_50,e_blur:1000,q_30'

Transformation = Union[str, CloudinaryPreset]

class DeliveryConfig(BaseModel):
    cloud_name: str
    folder: Optional[str] = None
    marker: str = "/o/"

def build_transformation(
    width: Optional[int] = None,
    height: Optional[int] = None,
    quality: Optional[Union[int, str]] = None,
    format: Optional[str] = None,
    crop: Optional[str] = None,
    gravity: Optional[str] = None,
    blur: Optional[int] = None,
    dpr: Optional[float] = None,
    effect: Optional[str] = None,
    aspect_ratio: Optional[str] = None,
) -> str:
    """Compose a transformation descriptor such as ``w_800,q_auto,c_fill``."""
    parts = []
    if width:
        parts.append(f"w_{width}")
    if height:
        parts.append(f"h_{height}")
    if quality:
        parts.append(f"q_{quality}")
    if format:
        parts.append(f"f_{format}")
    if crop:
        parts.append(f"c_{crop}")
    if gravity:
        parts.append(f"g_{gravity}")
    if blur:
        parts.append(f"e_blur:{blur}")
    if dpr:
        parts.append(f"dpr_{dpr}")
    if effect:
        parts.append(f"e_{effect}")
    if aspect_ratio:
        parts.append(f"ar_{aspect_ratio}")
    return ",".join(parts)

def _descriptor(transformations: Transformation) -> str:
    if isinstance(transformations, CloudinaryPreset):
        return transformations.value
    return transformations

def is_cloudinary_url(url: str, cloud_name: Optional[str] = None) -> bool:
    if not url:
        return False
    return "cloudinary.com" in url or bool(cloud_name and cloud_name in url)

def extract_public_id(url: str) -> str:
    """Return the public ID of a Cloudinary upload URL, or the input unchanged"""
    if not is_cloudinary_url(url):
        return url
    match = re.search(r"upload/(?:.*/)?(.+)$", url)
    return match.group(1) if match else url

class CloudinaryUrlBuilder:
    def __init__(self, config: DeliveryConfig):
        self.config = config

    def update_config(self, **changes) -> DeliveryConfig:
        self.config = self.config.model_copy(update=changes)
        return self.config.model_copy()

    def _base(self, mode: str) -> str:
        return f"{CLOUDINARY_HOST}/{self.config.cloud_name}/image/{mode}"

    def _fetch_url(self, source_url: str, descriptor: str) -> str:
        encoded = quote(source_url, safe=_URI_COMPONENT_SAFE)
        return f"{self._base('fetch')}/{descriptor}/{encoded}"

    def _object_key(self, source_url: str) -> Optional[str]:
        path = urlsplit(source_url).path
        start = path.find(self.config.marker)
        if start == -1:
            return None
        key = unquote(path[start + len(self.config.marker):], errors="strict")
        return key.split("?", 1)[0]

    def get_delivery_url(
        self,
        source_url: str,
        transformations: Transformation = CloudinaryPreset.GALLERY,
    ) -> str:
        """Rewrite a storage URL into a Cloudinary delivery URL.

        Returns an empty string for empty input or for a URL whose scheme
        is not http(s). Never raises: anything that cannot be mapped onto
        an upload-mode key is delivered through fetch mode.
        """
        if not source_url:
            return ""
        descriptor = _descriptor(transformations)
        try:
            scheme = urlsplit(source_url).scheme
            if scheme and scheme.lower() not in SUPPORTED_SCHEMES:
                logger.warning(f"Unsupported image URL scheme: {source_url}")
                return ""
            if not scheme:
                raise ValueError("URL has no scheme")

            key = self._object_key(source_url)
            if key:
                prefix = f"{self.config.folder}/" if self.config.folder else ""
                logger.debug(f"Using Cloudinary upload mapping for path: {prefix}{key}")
                return f"{self._base('upload')}/{descriptor}/{prefix}{key}"

            logger.debug(f"No object key in URL, using Cloudinary fetch mode for: {source_url}")
            return self._fetch_url(source_url, descriptor)
        except Exception as e:
            logger.debug(f"Could not parse image URL {source_url!r} ({str(e)}), using fetch mode")
            return self._fetch_url(source_url, descriptor)

    def responsive_urls(self, source_url: str, widths: Iterable[int] = RESPONSIVE_WIDTHS) -> Dict[int, str]:
        return {
            width: self.get_delivery_url(source_url, f"w_{width},c_limit,q_auto")
            for width in widths
        }

    def responsive_src_set(self, source_url: str, widths: Iterable[int] = RESPONSIVE_WIDTHS) -> str:
        """Build an HTML ``srcset`` value, one entry per target width"""
        return ", ".join(
            f"{url} {width}w"
            for width, url in self.responsive_urls(source_url, widths).items()
        )

    def blur_placeholder(self, source_url: str) -> str:
        return self.get_delivery_url(source_url, CloudinaryPreset.BLUR_PLACEHOLDER)

    def watermarked(self, source_url: str) -> str:
        return self.get_delivery_url(source_url, CloudinaryPreset.WATERMARK)

    def social_image(self, source_url: str) -> str:
        return self.get_delivery_url(source_url, CloudinaryPreset.SOCIAL)

    def custom(self, source_url: str, transformations: str) -> str:
        return self.get_delivery_url(source_url, transformations)

@lru_cache()
def get_url_builder() -> CloudinaryUrlBuilder:
    settings = get_settings()
    return CloudinaryUrlBuilder(DeliveryConfig(
        cloud_name=settings.cloudinary_cloud_name,
        folder=settings.cloudinary_folder,
        marker=settings.storage_url_marker,
    ))

def configure_cloudinary():
    settings = get_settings()
    cloudinary.config(
        cloud_name=settings.cloudinary_cloud_name,
        api_key=settings.cloudinary_api_key,
        api_secret=settings.cloudinary_api_secret,
        secure=True
    )
    logger.info("Cloudinary configured successfully")

async def upload_to_cloudinary(file_path: str, folder: Optional[str] = None) -> dict:
    settings = get_settings()
    try:
        result = cloudinary.uploader.upload(
            file_path,
            folder=folder or settings.cloudinary_folder,
            resource_type="image",
            allowed_formats=["jpg", "jpeg", "png", "webp"],
            transformation=[{"quality": "auto", "fetch_format": "auto"}]
        )
        return {
            "url": result.get("secure_url"),
            "public_id": result.get("public_id"),
            "width": result.get("width"),
            "height": result.get("height"),
        }
    except Exception as e:
        logger.error(f"Cloudinary upload failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Image upload to Cloudinary failed"
        )

async def delete_from_cloudinary(public_id: str) -> bool:
    try:
        result = cloudinary.uploader.destroy(public_id, resource_type="image")
        return result.get("result") == "ok"
    except Exception as e:
        logger.error(f"Cloudinary delete failed for {public_id}: {str(e)}")
        return False
