"""Text-generation collaborator backed by the Anthropic Messages API.

Replies are expected to be JSON (optionally fenced in a markdown code block)
and are validated against a Pydantic model. Any failure, from transport to
schema mismatch, surfaces as ``UpstreamGenerationFailure`` so callers can
fall back to deterministic output.
"""
import json
import logging
import re
from typing import Optional, Type, TypeVar

import anthropic
from anthropic import AsyncAnthropic
from pydantic import BaseModel, ValidationError

from app.config import Settings
from app.errors import UpstreamGenerationFailure

logger = logging.getLogger(__name__)
T = TypeVar("T", bound=BaseModel)


def strip_llm_fences(raw_output: str) -> str:
    """Strip markdown code fences from LLM output.

    Handles: ```json ... ```, ``` ... ```, leading/trailing whitespace.
    """
    cleaned = raw_output.strip()

    fence_match = re.search(r"```(?:json)?\s*\n?(.*?)```", cleaned, re.DOTALL)
    if fence_match:
        return fence_match.group(1).strip()

    if cleaned.startswith("```json"):
        cleaned = cleaned[7:]
    elif cleaned.startswith("```"):
        cleaned = cleaned[3:]
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]
    return cleaned.strip()


def parse_llm_json(raw_output: str, model: Type[T]) -> T:
    """Parse LLM output as JSON and validate it against a Pydantic model.

    Raises:
        UpstreamGenerationFailure: Output is not JSON or does not match ``model``.
    """
    cleaned = strip_llm_fences(raw_output)
    try:
        parsed = json.loads(cleaned)
        return model.model_validate(parsed)
    except json.JSONDecodeError as e:
        raise UpstreamGenerationFailure(f"Generation output is not valid JSON: {e}") from e
    except ValidationError as e:
        raise UpstreamGenerationFailure(
            f"Generation output does not match {model.__name__}: {e.error_count()} errors"
        ) from e


class GenerationClient:
    """Async client for the text-generation collaborator.

    Without an API key the client is disabled (demo mode) and never
    makes network calls.
    """

    def __init__(
        self,
        api_key: Optional[str],
        model: str,
        max_tokens: int = 6144,
        timeout: float = 120.0,
        client: Optional[AsyncAnthropic] = None,
    ):
        self.model = model
        self.max_tokens = max_tokens
        if client is not None:
            self._client: Optional[AsyncAnthropic] = client
        elif api_key:
            self._client = AsyncAnthropic(api_key=api_key, timeout=timeout)
        else:
            self._client = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "GenerationClient":
        return cls(
            api_key=settings.anthropic_api_key,
            model=settings.anthropic_model,
            max_tokens=settings.llm_max_tokens,
            timeout=settings.llm_timeout_seconds,
        )

    @property
    def enabled(self) -> bool:
        return self._client is not None

    async def complete(self, system: str, messages: list[dict[str, str]]) -> str:
        """Run one Messages API call and return the concatenated text blocks.

        Raises:
            UpstreamGenerationFailure: Disabled client, API error or empty reply.
        """
        if self._client is None:
            raise UpstreamGenerationFailure("Generation client has no API key configured")
        try:
            response = await self._client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=system,
                messages=messages,
            )
        except anthropic.APIError as e:
            logger.warning(f"Generation call failed: {e}")
            raise UpstreamGenerationFailure(f"Generation call failed: {e}") from e

        text = "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )
        if not text.strip():
            raise UpstreamGenerationFailure("Generation returned no text")
        return text

    async def generate_json(self, system: str, prompt: str, schema: Type[T]) -> T:
        """Ask for a JSON reply and validate it against ``schema``."""
        raw = await self.complete(system, [{"role": "user", "content": prompt}])
        result = parse_llm_json(raw, schema)
        logger.info(f"Generation produced valid {schema.__name__}")
        return result
