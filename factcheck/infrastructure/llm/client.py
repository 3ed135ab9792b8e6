"""
Gemini REST client for reasoning-service interactions.
"""
import json
import logging
from typing import Optional, Dict, Any, List

import requests
import google.auth
import google.auth.transport.requests
from google.oauth2 import service_account

from ...config import VERTEX_LOCATION, MODEL_NAME, LLM_TIMEOUT, MAX_OUTPUT_TOKENS, GENERATIVE_LANGUAGE_BASE
from ...errors import ReasoningServiceError, MalformedResponseError

logger = logging.getLogger("llm_client")

Content = Dict[str, Any]


def text_part(text: str) -> Dict[str, Any]:
    return {"text": text}


def inline_part(data_b64: str, mime_type: str) -> Dict[str, Any]:
    """Binary attachment part. Accepts a bare base64 string or a data URL."""
    if data_b64.startswith("data:") and "," in data_b64:
        data_b64 = data_b64.split(",", 1)[1]
    return {"inlineData": {"mimeType": mime_type, "data": data_b64}}


class GeminiRestClient:
    """REST-based client for Gemini models (AI Studio API key or Vertex AI)."""

    def __init__(self,
                 project: Optional[str] = None,
                 location: str = VERTEX_LOCATION,
                 model: str = MODEL_NAME,
                 api_key: Optional[str] = None,
                 credentials_json: Optional[str] = None,
                 timeout: int = LLM_TIMEOUT,
                 session: Optional[requests.Session] = None):
        if not api_key and not project:
            raise ValueError("Either api_key or project is required for the reasoning service")
        self.project = project
        self.location = location
        self.model = model
        self.api_key = api_key
        self.credentials_json = credentials_json
        self.timeout = timeout
        self.session = session or requests.Session()
        self._token = None

        if api_key:
            self.url = f"{GENERATIVE_LANGUAGE_BASE}/models/{self.model}:generateContent"
        else:
            base_url = f"https://{self.location}-aiplatform.googleapis.com/v1"
            model_resource = f"projects/{self.project}/locations/{self.location}/publishers/google/models/{self.model}"
            self.url = f"{base_url}/{model_resource}:generateContent"

    def _refresh_token(self):
        """Refresh the OAuth token for API calls."""
        if self.credentials_json:
            creds = service_account.Credentials.from_service_account_file(
                self.credentials_json,
                scopes=["https://www.googleapis.com/auth/cloud-platform"],
            )
        else:
            creds, _ = google.auth.default(scopes=["https://www.googleapis.com/auth/cloud-platform"])

        auth_req = google.auth.transport.requests.Request()
        creds.refresh(auth_req)
        self._token = creds.token

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["x-goog-api-key"] = self.api_key
        else:
            if not self._token:
                self._refresh_token()
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def generate_content(
        self,
        contents: List[Content],
        temperature: float = 0.0,
        max_output_tokens: int = MAX_OUTPUT_TOKENS,
        response_schema: Optional[Dict[str, Any]] = None,
        system_instruction: Optional[str] = None,
    ) -> str:
        """
        Generate content using the generateContent REST API.

        Args:
            contents: Conversation contents, each ``{"role": ..., "parts": [...]}``
            temperature: Sampling temperature
            max_output_tokens: Output token cap
            response_schema: When given, request JSON output conforming to it
            system_instruction: Optional system prompt

        Returns:
            Text of the first candidate

        Raises:
            ReasoningServiceError: Transport failure or HTTP status >= 400
        """
        body: Dict[str, Any] = {
            "contents": contents,
            "generationConfig": {
                "temperature": float(temperature),
                "maxOutputTokens": int(max_output_tokens),
            },
        }
        if response_schema is not None:
            body["generationConfig"]["responseMimeType"] = "application/json"
            body["generationConfig"]["responseSchema"] = response_schema
        if system_instruction:
            body["systemInstruction"] = {"parts": [text_part(system_instruction)]}

        try:
            resp = self.session.post(self.url, headers=self._headers(), json=body, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error("Reasoning service transport failure: %s", e)
            raise ReasoningServiceError(f"Reasoning service request failed: {e}") from e

        if resp.status_code >= 400:
            # Body carries the RESOURCE_EXHAUSTED / UNAVAILABLE status text
            raise ReasoningServiceError(f"Gemini REST error {resp.status_code}: {resp.text}", status=resp.status_code)

        try:
            resp_json = resp.json()
        except ValueError as e:
            raise MalformedResponseError("The reasoning service returned a non-JSON envelope.") from e
        return self._parse_response_text(resp_json)

    def _parse_response_text(self, resp_json: Dict[str, Any]) -> str:
        """
        Parse response JSON to extract text content.
        Concatenates every text part of the first candidate.
        """
        cands = resp_json.get("candidates") or []
        if cands:
            parts = (cands[0].get("content") or {}).get("parts") or []
            texts = [p["text"] for p in parts if isinstance(p, dict) and isinstance(p.get("text"), str)]
            if texts:
                return "".join(texts)
            logger.warning("Candidate had no text (finishReason=%s)", cands[0].get("finishReason"))

        if isinstance(resp_json.get("text"), str):
            return resp_json["text"]
        return ""

    def generate_json(self, contents: List[Content], response_schema: Dict[str, Any],
                      temperature: float = 0.0) -> Dict[str, Any]:
        """
        Generate a JSON document conforming to ``response_schema``.

        Raises:
            MalformedResponseError: Output is empty or not a JSON object
        """
        logger.debug("Sending JSON prompt to LLM...")
        text = self.generate_content(contents, temperature=temperature, response_schema=response_schema)
        logger.debug("Raw LLM output: %s", repr(text[:500]))
        return parse_json_text(text)


def parse_json_text(text: str) -> Dict[str, Any]:
    """Parse model output as a JSON object, tolerating fences or surrounding prose."""
    cleaned = _strip_code_fences(text or "")
    if not cleaned:
        raise MalformedResponseError("The reasoning service returned an empty response.")
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.warning("json.loads failed: %s", e)
        start = cleaned.find("{")
        end = cleaned.rfind("}")
        if start == -1 or end <= start:
            raise MalformedResponseError("The reasoning service did not return valid JSON.") from e
        try:
            parsed = json.loads(cleaned[start:end + 1])
        except json.JSONDecodeError as e2:
            raise MalformedResponseError("The reasoning service did not return valid JSON.") from e2

    if not isinstance(parsed, dict):
        raise MalformedResponseError("The reasoning service returned JSON that is not an object.")
    return parsed


def _strip_code_fences(content: str) -> str:
    text = content.strip()
    if text.startswith("```"):
        lines = text.splitlines()[1:]
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        text = "\n".join(lines).strip()
    return text
