from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import RedirectResponse

from tinyhawk_app.dependencies import get_redirect_service
from tinyhawk_app.schemas.request import RequestContext
from tinyhawk_app.services.redirect_service import RedirectService

router = APIRouter(tags=["redirect"])


@router.get("/{code}")
async def redirect_to_target(
    code: str,
    request: Request,
    redirect_service: RedirectService = Depends(get_redirect_service),
):
    """
    Redirect to the original URL.

    Flow:
    1. Resolve the code and bump click_count (atomic UPDATE)
    2. Schedule click recording + geo enrichment in the background
    3. Redirect immediately (user doesn't wait for analytics!)

    Unknown codes raise NotFoundError, rendered as 404 by the app's
    exception handler.
    """
    context = RequestContext(
        forwarded_for=request.headers.get("x-forwarded-for"),
        client_host=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
        referrer=request.headers.get("referer"),
    )
    target_url = await redirect_service.resolve_and_record(code, context)
    return RedirectResponse(url=target_url, status_code=status.HTTP_302_FOUND)
