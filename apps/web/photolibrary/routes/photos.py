"""Photo library page routes."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse

from photolibrary.core.logging_safety import safe_log_identifier
from photolibrary.core.templating import templates
from photolibrary.routes.dependencies import SessionLogin, get_bridge, get_session_login
from photolibrary.services.photo_library import AuthorizedApiBridge

router = APIRouter(tags=["Photo Library"])
logger = logging.getLogger(__name__)


@router.get("/", response_class=HTMLResponse, name="welcome")
async def welcome_page(
    request: Request,
    session_login: Annotated[SessionLogin, Depends(get_session_login)],
    bridge: Annotated[AuthorizedApiBridge, Depends(get_bridge)],
) -> HTMLResponse:
    principal = session_login.principal
    logger.info(
        "welcome.viewed principal_id=%s attributes=%s",
        safe_log_identifier(principal.name, prefix="pid"),
        sorted(principal.model_dump(exclude_none=True)),
    )
    model = bridge.build_view_model(principal)
    return templates.TemplateResponse(request, "welcome.html", model.model_dump())


@router.get("/photolibrary/albums", response_class=HTMLResponse, name="albums")
async def list_albums(
    request: Request,
    session_login: Annotated[SessionLogin, Depends(get_session_login)],
    bridge: Annotated[AuthorizedApiBridge, Depends(get_bridge)],
) -> HTMLResponse:
    albums = await bridge.list_albums(session_login.principal, session_login.registration_id)
    model = bridge.build_view_model(session_login.principal)
    return templates.TemplateResponse(
        request,
        "album-listing.html",
        {**model.model_dump(), "albums": albums},
    )


@router.get("/photolibrary/pics", response_class=HTMLResponse, name="photos")
async def list_photos(
    request: Request,
    album_id: Annotated[str, Query(alias="id", min_length=1)],
    session_login: Annotated[SessionLogin, Depends(get_session_login)],
    bridge: Annotated[AuthorizedApiBridge, Depends(get_bridge)],
) -> HTMLResponse:
    photos = await bridge.list_photos(session_login.principal, session_login.registration_id, album_id)
    model = bridge.build_view_model(session_login.principal)
    return templates.TemplateResponse(
        request,
        "photos-listing.html",
        {**model.model_dump(), "photos": photos, "album_id": album_id},
    )
