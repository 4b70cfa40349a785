"""
Image search endpoints for proposal cover and section images
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import AliasChoices, BaseModel, Field

from ..auth import get_current_user
from ..models import User
from ..services.unsplash_service import (
    PhotoSearchResult,
    UnsplashError,
    UnsplashNotConfigured,
    UnsplashService,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/images", tags=["Images"])


class DownloadRequest(BaseModel):
    download_location: str = Field(
        ..., min_length=1, validation_alias=AliasChoices("download_location", "downloadLocation")
    )


def get_unsplash_service() -> UnsplashService:
    return UnsplashService()


@router.get("/search", response_model=PhotoSearchResult)
async def search_images(
    query: str = Query(..., min_length=1, max_length=200),
    page: int = Query(1, ge=1),
    per_page: int = Query(12, ge=1, le=30),
    current_user: User = Depends(get_current_user),
    unsplash: UnsplashService = Depends(get_unsplash_service),
):
    """Search stock photos"""
    try:
        return await unsplash.search_photos(query, page=page, per_page=per_page)
    except UnsplashNotConfigured as e:
        raise HTTPException(status_code=503, detail="Image search not configured") from e
    except UnsplashError as e:
        raise HTTPException(status_code=502, detail=str(e)) from e


@router.post("/download")
async def track_download(
    data: DownloadRequest,
    current_user: User = Depends(get_current_user),
    unsplash: UnsplashService = Depends(get_unsplash_service),
):
    # Attribution ping; the photo is usable whether or not it lands
    tracked = await unsplash.trigger_download(data.download_location)
    return {"success": True, "tracked": tracked}
