"""Shared helpers for session handling and route utilities."""

from __future__ import annotations

from typing import Optional
from uuid import uuid4

from fastapi import UploadFile
from starlette.requests import Request

from services import AppServices, EnhancementController, SourceImage, ViewState

SESSION_ID_KEY = "session_id"


def get_session_id(request: Request) -> str:
    # Create a stable session id that keys the in-memory controller.
    session_id = request.session.get(SESSION_ID_KEY)
    if not session_id:
        session_id = uuid4().hex
        request.session[SESSION_ID_KEY] = session_id
    return session_id


def get_services(request: Request) -> AppServices:
    return request.app.state.services


def get_controller(request: Request) -> EnhancementController:
    return get_services(request).sessions.get(get_session_id(request))


def peek_controller(request: Request) -> Optional[EnhancementController]:
    # Read-only routes must not allocate sessions for cookie-less visitors.
    return get_services(request).sessions.peek(request.session.get(SESSION_ID_KEY))


def current_state(request: Request) -> ViewState:
    controller = peek_controller(request)
    return controller.state if controller is not None else ViewState()


def end_session(request: Request) -> bool:
    session_id = request.session.pop(SESSION_ID_KEY, None)
    if not session_id:
        return False
    return get_services(request).sessions.discard(session_id)


def has_file(upload: Optional[UploadFile]) -> bool:
    return bool(upload and upload.filename)


async def read_upload(upload: UploadFile) -> SourceImage:
    data = await upload.read()
    return SourceImage(data=data, media_type=upload.content_type or "", filename=upload.filename)
