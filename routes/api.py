"""JSON API endpoints mirroring the page's upload, prompt, and enhance actions."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, File, Request, UploadFile
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel

from routes.utils import (
    current_state,
    end_session,
    get_controller,
    get_services,
    has_file,
    peek_controller,
    read_upload,
)
from services import ViewState
from services.controller import validate_source
from services.errors import ValidationError

api_router = APIRouter(prefix="/api")
logger = logging.getLogger(__name__)

MISSING_INPUT_MESSAGE = "Please upload an image and enter a prompt."
IN_PROGRESS_MESSAGE = "An enhancement is already in progress."


class PromptUpdate(BaseModel):
    prompt: str = ""


def _state_payload(request: Request, state: ViewState) -> dict:
    payload = state.to_dict()
    payload["ai_available"] = get_services(request).ai_available
    return payload


@api_router.get("/health")
def health_check() -> dict:
    return {"status": "ok"}


@api_router.get("/state", name="api_state")
def view_state(request: Request):
    return _state_payload(request, current_state(request))


@api_router.post("/image", name="api_upload")
async def upload_image(request: Request, image: Optional[UploadFile] = File(default=None)):
    if not has_file(image):
        return JSONResponse({"error": "Please select an image."}, status_code=400)
    controller = get_controller(request)
    source = await read_upload(image)
    accepted = controller.select_file(source)
    payload = _state_payload(request, controller.state)
    if accepted:
        return payload
    if not controller.state.is_loading:
        return JSONResponse(payload, status_code=400)
    # The enhancing view cannot hold an error, so the rejection travels in the response.
    try:
        validate_source(source)
    except ValidationError as exc:
        payload["error"] = str(exc)
    else:
        payload["error"] = IN_PROGRESS_MESSAGE
    return JSONResponse(payload, status_code=409)


@api_router.put("/prompt", name="api_prompt")
def update_prompt(request: Request, update: PromptUpdate):
    controller = get_controller(request)
    controller.set_prompt(update.prompt)
    return _state_payload(request, controller.state)


@api_router.post("/enhance", name="api_enhance")
async def enhance_image(request: Request):
    controller = get_controller(request)
    if not await controller.enhance():
        state = controller.state
        payload = _state_payload(request, state)
        payload["error"] = IN_PROGRESS_MESSAGE if state.is_loading else MISSING_INPUT_MESSAGE
        return JSONResponse(payload, status_code=409)
    return _state_payload(request, controller.state)


@api_router.delete("/session", name="api_end_session")
def delete_session(request: Request):
    return {"discarded": end_session(request)}


@api_router.get("/images/{handle_id}", name="api_image_asset")
def image_asset(request: Request, handle_id: str):
    controller = peek_controller(request)
    handle = controller.handles.get(handle_id) if controller is not None else None
    if not handle:
        return JSONResponse({"error": "Image not found."}, status_code=404)
    headers = {"Cache-Control": "no-store"}
    return Response(content=handle.data, media_type=handle.media_type, headers=headers)
