"""
Tests for the Gemini edit client with the SDK mocked out
"""
import base64
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from services.ai import build_edit_client
from services.ai.gemini import GeminiEditClient, model_label
from services.errors import ServiceError


def _part(text=None, inline_data=None):
    return SimpleNamespace(text=text, inline_data=inline_data)


def _response(*parts):
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=list(parts)))])


def _sdk(response=None, error=None):
    sdk = MagicMock()
    sdk.aio.models.generate_content = AsyncMock(return_value=response, side_effect=error)
    return sdk


@pytest.mark.asyncio
class TestGeminiSubmit:
    """Tests for GeminiEditClient.submit"""

    async def test_returns_first_inline_image_as_base64(self, png_bytes, png_base64):
        sdk = _sdk(
            _response(
                _part(text="Here is your edit."),
                _part(inline_data=SimpleNamespace(mime_type="image/png", data=png_bytes)),
                _part(inline_data=SimpleNamespace(mime_type="image/png", data=b"second")),
            )
        )
        client = GeminiEditClient(api_key="", model_name="gemini-2.5-flash-image", client=sdk)

        result = await client.submit(png_base64, "image/png", "add a hat")

        assert result == base64.b64encode(png_bytes).decode("ascii")
        sdk.aio.models.generate_content.assert_awaited_once()

    async def test_sends_image_then_instruction(self, png_bytes, png_base64):
        sdk = _sdk(_response())
        client = GeminiEditClient(api_key="", model_name="gemini-2.5-flash-image", client=sdk)

        await client.submit(png_base64, "image/png", "add a hat")

        kwargs = sdk.aio.models.generate_content.await_args.kwargs
        assert kwargs["model"] == "gemini-2.5-flash-image"
        image_part, text_part = kwargs["contents"]
        assert image_part.inline_data.data == png_bytes
        assert image_part.inline_data.mime_type == "image/png"
        assert text_part.text == "add a hat"
        modalities = [str(getattr(m, "value", m)).upper() for m in kwargs["config"].response_modalities]
        assert "IMAGE" in modalities

    async def test_text_only_response_returns_none(self, png_base64):
        sdk = _sdk(_response(_part(text="I can't edit that image.")))
        client = GeminiEditClient(api_key="", client=sdk)

        assert await client.submit(png_base64, "image/png", "add a hat") is None

    async def test_no_candidates_returns_none(self, png_base64):
        sdk = _sdk(SimpleNamespace(candidates=None))
        client = GeminiEditClient(api_key="", client=sdk)

        assert await client.submit(png_base64, "image/png", "add a hat") is None

    async def test_non_image_inline_data_is_skipped(self, png_base64):
        sdk = _sdk(_response(_part(inline_data=SimpleNamespace(mime_type="text/plain", data=b"hi"))))
        client = GeminiEditClient(api_key="", client=sdk)

        assert await client.submit(png_base64, "image/png", "add a hat") is None

    async def test_base64_string_data_is_returned_verbatim(self, png_base64):
        sdk = _sdk(_response(_part(inline_data={"mimeType": "image/png", "data": "QUJD"})))
        client = GeminiEditClient(api_key="", client=sdk)

        assert await client.submit(png_base64, "image/png", "add a hat") == "QUJD"

    async def test_remote_error_is_wrapped_verbatim_without_retry(self, png_base64):
        sdk = _sdk(error=RuntimeError("429 RESOURCE_EXHAUSTED: quota exceeded"))
        client = GeminiEditClient(api_key="", client=sdk)

        with pytest.raises(ServiceError) as exc_info:
            await client.submit(png_base64, "image/png", "add a hat")

        assert str(exc_info.value) == "429 RESOURCE_EXHAUSTED: quota exceeded"
        assert sdk.aio.models.generate_content.await_count == 1

    async def test_invalid_payload_fails_before_calling_remote(self):
        sdk = _sdk(_response())
        client = GeminiEditClient(api_key="", client=sdk)

        with pytest.raises(ServiceError):
            await client.submit("not base64!!", "image/png", "add a hat")

        sdk.aio.models.generate_content.assert_not_awaited()

    async def test_unconfigured_client_raises_service_error(self, png_base64):
        client = GeminiEditClient(api_key="")

        assert client.available is False
        with pytest.raises(ServiceError):
            await client.submit(png_base64, "image/png", "add a hat")


class TestBuildEditClient:
    """Tests for the provider factory"""

    def test_missing_key_returns_none(self):
        assert build_edit_client({"IMAGE_PROVIDER": "gemini", "GEMINI_API_KEY": ""}) is None

    def test_unknown_provider_returns_none(self):
        assert build_edit_client({"IMAGE_PROVIDER": "other", "GEMINI_API_KEY": "key"}) is None

    def test_model_label(self):
        assert model_label("gemini-2.5-flash-image") == "Gemini 2.5 Flash Image"
        assert model_label("custom-model") == "custom-model"
