import httpx
import os
import logging
from typing import List, Optional
from pathlib import Path
from datetime import datetime, timedelta
from dotenv import load_dotenv
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

# Load environment variables from project root
project_root = Path(__file__).parent.parent
env_path = project_root / '.env'
load_dotenv(env_path)

logger = logging.getLogger(__name__)

# API configuration
BACKEND_URL = os.getenv("BOT_BACKEND_URL", "http://127.0.0.1:8000/api/v1")

# ---- Cache storage ----
_cache = {
    "categories": {"data": None, "timestamp": None},
    "attributes": {"data": None, "timestamp": None},
}
CACHE_DURATION = timedelta(minutes=5)


def _fresh(entry, now) -> bool:
    return bool(entry["data"] and entry["timestamp"] and now - entry["timestamp"] < CACHE_DURATION)


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=8),
    retry=retry_if_exception_type(httpx.TransportError),
    reraise=True
)
async def _request(method: str, path: str, **kwargs) -> httpx.Response:
    async with httpx.AsyncClient(follow_redirects=True, timeout=30.0) as client:
        return await client.request(method, f"{BACKEND_URL}{path}", **kwargs)


async def _get_cached(key: str, path: str):
    now = datetime.now()
    entry = _cache[key]
    if _fresh(entry, now):
        return entry["data"]

    try:
        response = await _request("GET", path)
    except httpx.TransportError as e:
        logger.error(f"Failed to reach backend for {key}: {str(e)}")
        return entry["data"]
    if response.status_code != 200:
        logger.error(f"Failed to fetch {key}: {response.status_code} - {response.text}")
        # fallback to last cached
        return entry["data"]

    data = response.json()
    entry["data"] = data
    entry["timestamp"] = now
    return data


async def get_categories():
    return await _get_cached("categories", "/categories")


async def get_attributes():
    return await _get_cached("attributes", "/portfolio/attributes")


async def search_images(
    category_id: Optional[str] = None,
    limit: int = 5,
    start_after: Optional[str] = None,
    tags: Optional[List[str]] = None,
) -> Optional[list]:
    body = {"limit": limit}
    if category_id:
        body["categories"] = [category_id]
    if tags:
        body["tags"] = tags
    if start_after:
        body["start_after"] = start_after

    try:
        response = await _request("POST", "/portfolio/images/search", json=body)
    except httpx.TransportError as e:
        logger.error(f"Failed to reach backend for image search: {str(e)}")
        return None
    if response.status_code != 200:
        logger.error(f"Failed to fetch images: {response.status_code} - {response.text}")
        return None
    return response.json()


async def get_related_images(category_id: str, image_id: str, limit: int = 5) -> Optional[list]:
    try:
        response = await _request(
            "GET",
            f"/portfolio/images/{category_id}/{image_id}/related",
            params={"limit": limit}
        )
    except httpx.TransportError as e:
        logger.error(f"Failed to reach backend for related images: {str(e)}")
        return None
    if response.status_code != 200:
        logger.error(f"Failed to fetch related images: {response.status_code} - {response.text}")
        return None
    return response.json()


async def get_before_after() -> Optional[list]:
    try:
        response = await _request("GET", "/portfolio/before-after")
    except httpx.TransportError as e:
        logger.error(f"Failed to reach backend for before/after pairs: {str(e)}")
        return None
    if response.status_code != 200:
        logger.error(f"Failed to fetch before/after pairs: {response.status_code} - {response.text}")
        return None
    return response.json()
