"""Unsplash photo search for proposal cover images"""

import logging
from typing import Optional
from urllib.parse import urlparse

import httpx
from pydantic import BaseModel, Field, ValidationError

from ..config import UNSPLASH_ACCESS_KEY, UNSPLASH_API_BASE

logger = logging.getLogger(__name__)


class PhotoUrls(BaseModel):
    raw: str = ""
    full: str = ""
    regular: str = ""
    small: str = ""
    thumb: str = ""


class PhotoUser(BaseModel):
    name: str = ""
    username: str = ""


class PhotoLinks(BaseModel):
    download_location: Optional[str] = None


class Photo(BaseModel):
    id: str
    description: Optional[str] = None
    alt_description: Optional[str] = None
    urls: PhotoUrls = Field(default_factory=PhotoUrls)
    user: PhotoUser = Field(default_factory=PhotoUser)
    links: PhotoLinks = Field(default_factory=PhotoLinks)


class PhotoSearchResult(BaseModel):
    total: int = 0
    total_pages: int = 0
    results: list[Photo] = Field(default_factory=list)


class UnsplashNotConfigured(RuntimeError):
    """Raised when no access key is configured"""


class UnsplashError(RuntimeError):
    """Raised when a search request fails"""


class UnsplashService:
    """Search photos and report downloads per the provider's attribution rules"""

    def __init__(
        self,
        access_key: Optional[str] = None,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.access_key = access_key if access_key is not None else UNSPLASH_ACCESS_KEY
        self.base_url = (base_url or UNSPLASH_API_BASE).rstrip("/")
        self.transport = transport

    async def search_photos(self, query: str, page: int = 1, per_page: int = 12) -> PhotoSearchResult:
        """Search photos; raises UnsplashError on any failed request"""
        if not self.access_key:
            raise UnsplashNotConfigured("Unsplash access key not configured")

        params = {
            "query": query,
            "page": page,
            "per_page": per_page,
            "client_id": self.access_key,
        }
        logger.info(f"🖼️ Searching Unsplash for '{query}' (page {page})")
        try:
            async with httpx.AsyncClient(timeout=15.0, transport=self.transport) as client:
                response = await client.get(f"{self.base_url}/search/photos", params=params)
                response.raise_for_status()
                return PhotoSearchResult.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.error(f"❌ Unsplash returned an unreadable search payload: {e}")
            raise UnsplashError("Unsplash returned an unreadable response") from e
        except httpx.HTTPStatusError as e:
            logger.error(f"❌ Unsplash search failed: {e.response.status_code}")
            raise UnsplashError(f"Unsplash returned {e.response.status_code}") from e
        except httpx.RequestError as e:
            logger.error(f"❌ Unsplash unreachable: {e}")
            raise UnsplashError("Unsplash unreachable") from e

    def _is_api_url(self, url: str) -> bool:
        """The access key is only ever sent to the configured API host over https"""
        target = urlparse(url)
        return target.scheme == "https" and target.hostname == urlparse(self.base_url).hostname

    async def trigger_download(self, download_location: str) -> bool:
        """
        Report a photo as used. Failures are logged and never raised.

        Returns:
            True when the provider acknowledged the ping
        """
        if not self.access_key or not download_location:
            return False
        if not self._is_api_url(download_location):
            logger.warning(f"⚠️ Refusing download ping to foreign URL: {download_location}")
            return False
        try:
            async with httpx.AsyncClient(timeout=10.0, transport=self.transport) as client:
                response = await client.get(
                    download_location, params={"client_id": self.access_key}
                )
                response.raise_for_status()
            return True
        except httpx.HTTPError as e:
            logger.warning(f"⚠️ Unsplash download ping failed: {e}")
            return False
