"""OpenAIProvider with a mocked SDK client and blob storage."""
import base64
from unittest.mock import MagicMock

import httpx
import openai

from imagemax.services.image_generation.providers.openai import OpenAIProvider
from imagemax.storage.base import StorageError

PNG = b"\x89PNG\r\n\x1a\n" + bytes(range(64))
JPEG = b"\xff\xd8\xff\xe0" + bytes(range(64))

REQUEST = httpx.Request("POST", "https://api.openai.com/v1/images/generations")


def _client(response_data=None, side_effect=None):
    client = MagicMock()
    if side_effect is not None:
        client.images.generate.side_effect = side_effect
    else:
        client.images.generate.return_value.model_dump.return_value = response_data
    return client


def _storage(url="https://cdn.example.com/dalle.png"):
    storage = MagicMock()
    storage.backend_name = "test"
    storage.upload.return_value = url
    return storage


def _provider(client, storage=None, **config):
    base = {"api_key": "sk-test", "model": "dall-e-2", "size": "1024x1024"}
    base.update(config)
    return OpenAIProvider(base, storage or _storage(), client=client)


def test_base64_response_is_decoded_and_uploaded():
    client = _client({"created": 1, "data": [{"b64_json": base64.b64encode(PNG).decode(), "url": None}]})
    storage = _storage("https://cdn.example.com/dalle-1.png")

    result = _provider(client, storage).generate_image("A cat")

    assert result.success is True
    assert result.image_url == "https://cdn.example.com/dalle-1.png"
    client.images.generate.assert_called_once_with(
        model="dall-e-2",
        prompt="A cat",
        n=1,
        size="1024x1024",
        response_format="b64_json",
    )
    content, filename, content_type = storage.upload.call_args.args
    assert content == PNG
    assert filename.startswith("dalle-")
    assert filename.endswith(".png")
    assert content_type == "image/png"


def test_upload_uses_detected_format():
    client = _client({"data": [{"b64_json": base64.b64encode(JPEG).decode()}]})
    storage = _storage()

    _provider(client, storage).generate_image("A dog")

    _, filename, content_type = storage.upload.call_args.args
    assert filename.endswith(".jpeg")
    assert content_type == "image/jpeg"


def test_url_response_is_returned_without_upload():
    client = _client({"data": [{"b64_json": None, "url": "https://oaidalle.example.com/img.png"}]})
    storage = _storage()

    result = _provider(client, storage).generate_image("A cat")

    assert result.success is True
    assert result.image_url == "https://oaidalle.example.com/img.png"
    storage.upload.assert_not_called()


def test_empty_response_fails():
    result = _provider(_client({"data": []})).generate_image("A cat")

    assert result.success is False
    assert result.error == "No image data returned from DALL-E API"


def test_invalid_base64_fails_without_upload():
    storage = _storage()
    client = _client({"data": [{"b64_json": "not*base64"}]})

    result = _provider(client, storage).generate_image("A cat")

    assert result.success is False
    assert result.error == "Invalid base64 string"
    storage.upload.assert_not_called()


def test_oversized_image_fails():
    big = b"\x89PNG" + b"\x00" * (1024 * 1024)
    client = _client({"data": [{"b64_json": base64.b64encode(big).decode()}]})

    result = _provider(client, max_image_size_mb=1).generate_image("A cat")

    assert result.success is False
    assert "exceeds 1 MB" in result.error


def test_upload_failure_is_reported_as_result():
    storage = _storage()
    storage.upload.side_effect = StorageError("Bucket not found")
    client = _client({"data": [{"b64_json": base64.b64encode(PNG).decode()}]})

    result = _provider(client, storage).generate_image("A cat")

    assert result.success is False
    assert result.image_url is None
    assert result.error == "Bucket not found"


def test_unexpected_upload_fault_is_reported_as_result():
    storage = _storage()
    storage.upload.side_effect = RuntimeError("disk quota")
    client = _client({"data": [{"b64_json": base64.b64encode(PNG).decode()}]})

    result = _provider(client, storage).generate_image("A cat")

    assert result.success is False
    assert result.image_url is None
    assert result.error == "disk quota"


def test_http_error_status_describes_upstream_message():
    error = openai.BadRequestError(
        "Error code: 400",
        response=httpx.Response(400, request=REQUEST),
        body={"message": "Your request was rejected by the safety system"},
    )

    result = _provider(_client(side_effect=error)).generate_image("A cat")

    assert result.success is False
    assert result.error == "DALL-E API error: 400 - Your request was rejected by the safety system"


def test_connection_error_is_reported_as_result():
    error = openai.APIConnectionError(request=REQUEST)

    result = _provider(_client(side_effect=error)).generate_image("A cat")

    assert result.success is False
    assert result.error


def test_unexpected_exception_never_escapes():
    result = _provider(_client(side_effect=RuntimeError("boom"))).generate_image("A cat")

    assert result.success is False
    assert result.error == "boom"


def test_missing_api_key_fails_without_calling_api():
    provider = OpenAIProvider({"api_key": ""}, _storage())

    result = provider.generate_image("A cat")

    assert provider.is_available() is False
    assert result.success is False
    assert "OPENAI_API_KEY" in result.error
