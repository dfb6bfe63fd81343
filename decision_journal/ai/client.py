"""
Language-model client for the decision assistant.

``BaseLLMClient`` is the collaborator interface:

  generate_text(prompt)                  → str
  extract_structured(prompt, schema)     → Parsed[schema] | ParseFailure

``GeminiClient`` implements it over the Google Generative Language REST API.

Credential setup (.env, gitignored)::

    GOOGLE_GENERATIVE_AI_API_KEY=your_key

Endpoint::

    POST {base_url}/models/{model}:generateContent
      Header: x-goog-api-key: <key>
      Body:   {"contents": [{"role": "user", "parts": [{"text": "..."}]}],
               "generationConfig": {"temperature": 0.7,
                                    "responseMimeType": "application/json"}}
      → {"candidates": [{"content": {"parts": [{"text": "..."}]}}]}

Transport errors and non-2xx responses propagate as ``httpx`` exceptions;
unparseable structured output comes back as ``ParseFailure``.
"""

from __future__ import annotations

import json
import logging
import os
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Optional, TypeVar

from pydantic import BaseModel

from decision_journal.ai.parsing import parse_structured
from decision_journal.models.ai import ExtractionResult

if TYPE_CHECKING:
    import httpx

    from decision_journal.config import LLMConfig

logger = logging.getLogger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)


class BaseLLMClient(ABC):
    """Abstract language-model collaborator."""

    fast_model: str = ""
    pro_model: str = ""

    @abstractmethod
    def generate_text(
        self,
        prompt: str,
        *,
        model: Optional[str] = None,
        json_mode: bool = False,
    ) -> str:
        """Generate a completion for ``prompt``.

        Args:
            prompt: Full prompt text.
            model: Model override; defaults to the client's fast model.
            json_mode: Ask the provider for a JSON response body.

        Returns:
            The generated text.
        """
        ...

    def extract_structured(
        self,
        prompt: str,
        schema: type[SchemaT],
        *,
        model: Optional[str] = None,
    ) -> ExtractionResult[SchemaT]:
        """Ask for JSON matching ``schema`` and validate the reply.

        Returns:
            ``Parsed`` on success, ``ParseFailure`` when the reply cannot be
            decoded or validated.
        """
        schema_json = json.dumps(schema.model_json_schema(), indent=2)
        full_prompt = (
            f"{prompt}\n\n"
            "Respond with a single JSON object that conforms to this JSON schema. "
            "Do not include any other text.\n"
            f"{schema_json}"
        )
        text = self.generate_text(full_prompt, model=model, json_mode=True)
        result = parse_structured(text, schema)
        if result.kind == "parse_failure":
            logger.warning("Structured %s extraction failed: %s", schema.__name__, result.error)
        return result


class GeminiClient(BaseLLMClient):
    """Google Gemini client over the Generative Language REST API.

    Usage::

        client = GeminiClient(api_key=os.environ["GOOGLE_GENERATIVE_AI_API_KEY"])
        text = client.generate_text("Help me decide: pizza or sushi?")

    Pass ``http_client`` to reuse a connection pool or to inject an
    ``httpx.MockTransport`` in tests.
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        fast_model: str = "gemini-2.0-flash",
        pro_model: str = "gemini-1.5-pro-latest",
        temperature: float = 0.7,
        timeout_s: float = 60.0,
        http_client: Optional["httpx.Client"] = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.fast_model = fast_model
        self.pro_model = pro_model
        self.temperature = temperature
        self.timeout_s = timeout_s
        self._http_client = http_client

    def generate_text(
        self,
        prompt: str,
        *,
        model: Optional[str] = None,
        json_mode: bool = False,
    ) -> str:
        """Call ``generateContent`` and return the concatenated candidate text.

        Raises:
            RuntimeError: If no API key is configured.
            httpx.HTTPStatusError: On non-2xx API response.
            httpx.TransportError: On connection failure or timeout.
        """
        import httpx

        if not self.api_key:
            raise RuntimeError(
                "GOOGLE_GENERATIVE_AI_API_KEY must be set in .env to use the AI assistant."
            )

        model = model or self.fast_model
        generation_config: dict[str, Any] = {"temperature": self.temperature}
        if json_mode:
            generation_config["responseMimeType"] = "application/json"
        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": generation_config,
        }
        url = f"{self.base_url}/models/{model}:generateContent"
        headers = {"x-goog-api-key": self.api_key}

        logger.debug("POST %s (json_mode=%s, %d prompt chars)", url, json_mode, len(prompt))
        if self._http_client is not None:
            resp = self._http_client.post(url, json=payload, headers=headers, timeout=self.timeout_s)
        else:
            resp = httpx.post(url, json=payload, headers=headers, timeout=self.timeout_s)
        resp.raise_for_status()
        return _candidate_text(resp.json())


def _candidate_text(body: dict[str, Any]) -> str:
    """Concatenate the text parts of the first candidate (empty if none)."""
    candidates = body.get("candidates") or []
    if not candidates:
        logger.warning("Gemini response had no candidates: %s", body.get("promptFeedback"))
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(part.get("text", "") for part in parts)


def client_from_config(config: "LLMConfig") -> GeminiClient:
    """Build a ``GeminiClient`` from ``[llm]`` config and the environment."""
    return GeminiClient(
        api_key=os.environ.get(config.api_key_env),
        base_url=config.base_url,
        fast_model=config.fast_model,
        pro_model=config.pro_model,
        temperature=config.temperature,
        timeout_s=config.timeout_s,
    )
