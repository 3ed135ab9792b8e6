import json

import pytest
import requests

from factcheck.config import GENERATIVE_LANGUAGE_BASE
from factcheck.errors import MalformedResponseError, ReasoningServiceError
from factcheck.infrastructure.llm import GeminiRestClient, inline_part, parse_json_text, text_part
from factcheck.interview.testing import gemini_envelope

URL = f"{GENERATIVE_LANGUAGE_BASE}/models/gemini-2.5-flash:generateContent"


@pytest.fixture
def client(http):
    return GeminiRestClient(api_key="secret-key", session=http)


def test_requires_key_or_project():
    with pytest.raises(ValueError):
        GeminiRestClient()


def test_vertex_url_when_no_key(http):
    client = GeminiRestClient(project="proj", location="europe-west4", session=http)
    assert client.url == (
        "https://europe-west4-aiplatform.googleapis.com/v1/projects/proj/locations/europe-west4"
        "/publishers/google/models/gemini-2.5-flash:generateContent"
    )


def test_generate_content(http, client):
    http.add(URL, 200, gemini_envelope("Hello"))
    contents = [{"role": "user", "parts": [text_part("hi")]}]

    assert client.generate_content(contents, temperature=0.7) == "Hello"

    call = http.calls[0]
    assert call["method"] == "POST"
    assert call["headers"]["x-goog-api-key"] == "secret-key"
    assert call["json"]["contents"] == contents
    assert call["json"]["generationConfig"]["temperature"] == 0.7
    assert "responseSchema" not in call["json"]["generationConfig"]


def test_multiple_text_parts_are_joined(http, client):
    envelope = {"candidates": [{"content": {"parts": [{"text": "a"}, {"text": "b"}]}}]}
    http.add(URL, 200, envelope)
    assert client.generate_content([]) == "ab"


def test_http_error_carries_status_and_body(http, client):
    http.add(URL, 429, '{"error": {"status": "RESOURCE_EXHAUSTED"}}')
    with pytest.raises(ReasoningServiceError) as exc:
        client.generate_content([])
    assert exc.value.status == 429
    assert "RESOURCE_EXHAUSTED" in str(exc.value)


def test_transport_error(http, client):
    http.routes[URL] = requests.ConnectionError("down")
    with pytest.raises(ReasoningServiceError) as exc:
        client.generate_content([])
    assert exc.value.status is None


def test_non_json_envelope(http, client):
    http.add(URL, 200, "<html>oops</html>")
    with pytest.raises(MalformedResponseError):
        client.generate_content([])


def test_generate_json_sends_schema_and_parses_fenced_output(http, client):
    payload = {"ok": True}
    http.add(URL, 200, gemini_envelope("```json\n" + json.dumps(payload) + "\n```"))
    schema = {"type": "OBJECT", "properties": {"ok": {"type": "BOOLEAN"}}}

    assert client.generate_json([], schema, temperature=0.3) == payload

    config = http.calls[0]["json"]["generationConfig"]
    assert config["responseMimeType"] == "application/json"
    assert config["responseSchema"] == schema


@pytest.mark.parametrize("text, expected", [
    ('{"a": 1}', {"a": 1}),
    ('```\n{"a": 1}\n```', {"a": 1}),
    ('Here you go: {"a": {"b": 2}} thanks', {"a": {"b": 2}}),
])
def test_parse_json_text(text, expected):
    assert parse_json_text(text) == expected


@pytest.mark.parametrize("text", ["", "no json here", "[1, 2]", "{broken"])
def test_parse_json_text_rejects(text):
    with pytest.raises(MalformedResponseError):
        parse_json_text(text)


def test_inline_part_strips_data_url_prefix():
    assert inline_part("data:application/pdf;base64,QUJD", "application/pdf") == {
        "inlineData": {"mimeType": "application/pdf", "data": "QUJD"}
    }
    assert inline_part("QUJD", "image/png")["inlineData"]["data"] == "QUJD"
