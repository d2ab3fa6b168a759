"""FastAPI router: frame entry points and signed callbacks."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse, JSONResponse
from starlette.concurrency import run_in_threadpool

from src.api.models import ScreenDescriptor
from src.api.render import render
from src.services.session_service import MATCH_ID_PARAM, SessionService
from src.services.verification import ActionVerifier, VerifiedAction

router = APIRouter()


# -- Dependency providers --
def get_service(request: Request) -> SessionService:
    return request.app.state.service  # type: ignore[no-any-return]


def get_verifier(request: Request) -> ActionVerifier:
    return request.app.state.verifier  # type: ignore[no-any-return]


async def verified_action(
    request: Request, verifier: ActionVerifier = Depends(get_verifier)
) -> VerifiedAction:
    """The only way a route gets at the caller: verification runs off the event loop, before any match lock."""
    raw_body = await request.body()
    return await run_in_threadpool(verifier.verify, raw_body)


def frame_response(screen: ScreenDescriptor, status_code: int = 200) -> HTMLResponse:
    return HTMLResponse(content=render(screen), status_code=status_code)


# -- Entry points (not callbacks, nothing to verify) --
@router.get("/")
def route_home(service: SessionService = Depends(get_service)) -> HTMLResponse:
    return frame_response(service.home())


@router.post("/")
def route_home_back(service: SessionService = Depends(get_service)) -> HTMLResponse:
    """Target of every Back button, including the one on the verification error screen."""
    return frame_response(service.home())


@router.get("/pvp")
def route_invite(
    match_id: Optional[str] = Query(default=None, alias=MATCH_ID_PARAM),
    service: SessionService = Depends(get_service),
) -> HTMLResponse:
    return frame_response(service.invite(match_id))


@router.get("/health")
def route_health() -> JSONResponse:
    return JSONResponse({"ok": True})


# -- Signed callbacks --
@router.post("/action")
def route_action(
    action: VerifiedAction = Depends(verified_action),
    service: SessionService = Depends(get_service),
) -> HTMLResponse:
    return frame_response(service.handle_home_action(action))


@router.post("/bot")
def route_bot(
    action: VerifiedAction = Depends(verified_action),
    service: SessionService = Depends(get_service),
) -> HTMLResponse:
    return frame_response(service.play_bot(action))


@router.post("/pvp")
def route_pvp(
    action: VerifiedAction = Depends(verified_action),
    service: SessionService = Depends(get_service),
) -> HTMLResponse:
    return frame_response(service.play_pvp(action))
