"""
Unit tests for the chat-completion service.

The OpenAI client is replaced with a MagicMock whose completions are AsyncMocks.
"""

import base64
import io
import pytest
from unittest.mock import AsyncMock, MagicMock
from types import SimpleNamespace

from PIL import Image

from snaptrack.services.ai import (
    ChatResponseError,
    ChatService,
    encode_image_jpeg,
    extract_json_array,
)


@pytest.fixture
def openai_client(completion):
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=completion("ok"))
    return client


@pytest.fixture
def service(test_settings, openai_client):
    return ChatService(test_settings, client=openai_client)


class TestHelpers:
    """Tests for image and JSON helpers."""

    @pytest.mark.unit
    def test_encode_image_jpeg(self, image_bytes):
        encoded = encode_image_jpeg(image_bytes)

        image = Image.open(io.BytesIO(base64.b64decode(encoded)))
        assert image.format == "JPEG"
        assert image.mode == "RGB"

    @pytest.mark.unit
    def test_extract_json_array(self):
        assert extract_json_array('Here you go: [{"name": "Milk"}] Enjoy!') == '[{"name": "Milk"}]'
        assert extract_json_array("no items") == "no items"


class TestChatService:
    """Tests for ChatService."""

    @pytest.mark.unit
    def test_disabled_without_key(self, disabled_settings):
        assert ChatService(disabled_settings).is_enabled is False

    @pytest.mark.unit
    def test_enabled_with_key(self, test_settings):
        assert ChatService(test_settings).is_enabled is True

    @pytest.mark.unit
    async def test_not_configured_raises(self, disabled_settings):
        with pytest.raises(ChatResponseError):
            await ChatService(disabled_settings).compare_price("Milk", "Aldi")

    @pytest.mark.unit
    async def test_compare_price(self, service, openai_client, completion, test_settings):
        openai_client.chat.completions.create.return_value = completion("- at Aldi: $2.89 per gallon")

        answer = await service.compare_price("Milk", "Aldi")

        assert answer == "- at Aldi: $2.89 per gallon"
        kwargs = openai_client.chat.completions.create.await_args.kwargs
        assert kwargs["model"] == test_settings.price_model
        assert "Milk" in kwargs["messages"][0]["content"]

    @pytest.mark.unit
    async def test_lookup_barcode(self, service, openai_client, test_settings):
        await service.lookup_barcode("016000275478")

        kwargs = openai_client.chat.completions.create.await_args.kwargs
        assert kwargs["model"] == test_settings.barcode_model
        assert "016000275478" in kwargs["messages"][0]["content"]

    @pytest.mark.unit
    async def test_scan_receipt(self, service, openai_client, completion, image_bytes, test_settings):
        openai_client.chat.completions.create.return_value = completion(
            'Sure! ```json\n[{"name": "Milk", "price": 3.49}]\n```'
        )

        answer = await service.scan_receipt(image_bytes, "image/png")

        assert answer == '[{"name": "Milk", "price": 3.49}]'
        kwargs = openai_client.chat.completions.create.await_args.kwargs
        assert kwargs["model"] == test_settings.receipt_model
        text_part, image_part = kwargs["messages"][0]["content"]
        assert text_part["type"] == "text"
        assert image_part["image_url"]["url"].startswith("data:image/jpeg;base64,")

    @pytest.mark.unit
    async def test_empty_content_raises(self, service, openai_client, completion):
        openai_client.chat.completions.create.return_value = completion(None)

        with pytest.raises(ChatResponseError):
            await service.compare_price("Milk", "Aldi")

    @pytest.mark.unit
    async def test_no_choices_raises(self, service, openai_client):
        openai_client.chat.completions.create.return_value = SimpleNamespace(choices=[])

        with pytest.raises(ChatResponseError):
            await service.lookup_barcode("123")
