"""Server-rendered UI routes for the image enhancer page."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, File, Form, Request, UploadFile
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates

from routes.utils import current_state, end_session, get_controller, get_services, has_file, read_upload

web_router = APIRouter()
logger = logging.getLogger(__name__)


def _get_templates(request: Request) -> Jinja2Templates:
    return request.app.state.templates


def _back_to_index(request: Request) -> RedirectResponse:
    return RedirectResponse(url=str(request.url_for("web_index")), status_code=303)


@web_router.get("/", name="web_index")
def index(request: Request):
    services = get_services(request)
    state = current_state(request)
    context = {
        "request": request,
        "state": state,
        "ai_available": services.ai_available,
        "ai_label": services.ai_label,
    }
    return _get_templates(request).TemplateResponse(request, "index.html", context)


@web_router.post("/upload", name="web_upload")
async def upload_image(request: Request, image: Optional[UploadFile] = File(default=None)):
    controller = get_controller(request)
    if has_file(image):
        source = await read_upload(image)
        controller.select_file(source)
    return _back_to_index(request)


@web_router.post("/enhance", name="web_enhance")
async def enhance_image(request: Request, prompt: str = Form(default="")):
    controller = get_controller(request)
    controller.set_prompt(prompt)
    if not await controller.enhance():
        logger.info("Enhance ignored; image or prompt missing, or already enhancing")
    return _back_to_index(request)


@web_router.post("/reset", name="web_reset")
def reset_session(request: Request):
    end_session(request)
    return _back_to_index(request)
