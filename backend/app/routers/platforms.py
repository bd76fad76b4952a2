"""Known platforms router (labels and hostnames for display)."""

from fastapi import APIRouter

from app.models.bookmark import ApiResponse, PlatformInfo
from app.services.classifier.platforms import get_platform_info, list_platforms

router = APIRouter(prefix="/platforms", tags=["platforms"])


@router.get("", response_model=ApiResponse[list[PlatformInfo]])
async def get_platforms() -> ApiResponse[list[PlatformInfo]]:
    return ApiResponse(message="Fetched successfully", data=list_platforms())


@router.get("/{platform}", response_model=ApiResponse[PlatformInfo])
async def get_platform(platform: str) -> ApiResponse[PlatformInfo]:
    """Info for one platform; unknown slugs still resolve to a generic entry."""
    return ApiResponse(message="Fetched successfully", data=get_platform_info(platform))
