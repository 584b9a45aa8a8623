from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from tinyhawk_app.config import Settings
from tinyhawk_app.dependencies import (
    get_analytics_service,
    get_base_url,
    get_link_service,
    get_settings,
)
from tinyhawk_app.models.short_link import ShortLink
from tinyhawk_app.schemas.link import LinkCreate, LinkResponse
from tinyhawk_app.schemas.stats import StatsResponse
from tinyhawk_app.services.analytics_service import AnalyticsService
from tinyhawk_app.services.link_service import LinkService

router = APIRouter(prefix="/links", tags=["links"])


def to_response(link: ShortLink, base_url: str) -> LinkResponse:
    return LinkResponse(
        code=link.code,
        short_url=f"{base_url}/{link.code}",
        analytics_url=f"{base_url}/api/v1/links/{link.code}/stats",
        target_url=link.target_url,
        is_custom_alias=link.is_custom_alias,
        created_at=link.created_at,
        click_count=link.click_count,
    )


@router.post("/", response_model=LinkResponse, status_code=status.HTTP_201_CREATED)
async def create_short_link(
    link_data: LinkCreate,
    link_service: LinkService = Depends(get_link_service),
    base_url: str = Depends(get_base_url),
):
    """Create a short link, with a generated code or a custom alias"""
    link = await link_service.allocate(link_data.target_url, link_data.custom_alias)
    return to_response(link, base_url)


@router.get("/{code}", response_model=LinkResponse)
async def get_link_info(
    code: str,
    link_service: LinkService = Depends(get_link_service),
    base_url: str = Depends(get_base_url),
):
    """Get information about a short link"""
    link = await link_service.get_link(code)
    return to_response(link, base_url)


@router.get("/{code}/stats", response_model=StatsResponse)
async def get_link_stats(
    code: str,
    days: Optional[int] = Query(None, ge=1, le=365, description="Days covered by the time series"),
    analytics_service: AnalyticsService = Depends(get_analytics_service),
    base_url: str = Depends(get_base_url),
    app_settings: Settings = Depends(get_settings),
):
    """Click analytics: daily series, countries, referrers, latest clicks"""
    window = days or app_settings.stats_default_days
    return await analytics_service.get_stats(code, days=window, base_url=base_url)
