"""Guidance generation: situation -> Claude -> structured response.

The model call is the only I/O here. Empty completions are rejected before
the engine runs, so the engine never sees "no text received".

Two ways in:
  generate() - one request, returns the parsed guidance
  stream()   - yields text deltas as they arrive, then the parsed guidance
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import AsyncIterator, Optional, Union

import anthropic

from parentguidance.config import settings
from parentguidance.exceptions import EmptyCompletionError, GuidanceGenerationError
from parentguidance.logging_config import get_logger
from parentguidance.services.guidance.engine import parse
from parentguidance.services.guidance.preferences import GuidancePreferences
from parentguidance.services.guidance.prompts import GuidancePrompt, build_guidance_prompt
from parentguidance.services.guidance.schemas import (
    DynamicResponse,
    FixedResponse,
    StructuralMode,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class GeneratedGuidance:
    raw: str
    response: Union[FixedResponse, DynamicResponse]
    mode: StructuralMode
    prompt_version: str


@dataclass(frozen=True)
class GuidanceStreamEvent:
    """One streamed item: a text delta, or the final parsed result."""

    delta: str = ""
    result: Optional[GeneratedGuidance] = None


class GuidanceGenerator:
    """Holds only the API client, so one instance per process is enough."""

    def __init__(self, client: Optional[anthropic.AsyncAnthropic] = None) -> None:
        self.client = client or anthropic.AsyncAnthropic(api_key=settings.ANTHROPIC_API_KEY)
        self.model = settings.GUIDANCE_MODEL

    def _request(self, prompt: GuidancePrompt) -> dict:
        return {
            "model": self.model,
            "max_tokens": settings.GUIDANCE_MAX_TOKENS,
            "system": prompt.system,
            "messages": [{"role": "user", "content": prompt.user}],
        }

    def _prepare(
        self,
        situation: str,
        preferences: GuidancePreferences,
        framework: Optional[str],
        family_context: Optional[str],
    ) -> tuple[GuidancePrompt, str]:
        prompt = build_guidance_prompt(
            situation,
            mode=preferences.structure_mode,
            style=preferences.style,
            framework=framework,
            family_context=family_context,
        )
        version = preferences.prompt_version(has_framework=bool(framework))
        logger.info(
            "guidance_requested",
            mode=preferences.structure_mode.value,
            style=preferences.style.value,
            prompt_version=version,
        )
        return prompt, version

    async def complete(self, system: str, user: str) -> str:
        """Send one prompt to Claude and return the joined text blocks."""
        try:
            response = await self.client.messages.create(
                **self._request(GuidancePrompt(system=system, user=user))
            )
        except anthropic.APIError as e:
            logger.error("guidance_api_error", model=self.model, error=str(e))
            raise GuidanceGenerationError(f"Claude API request failed: {e}", e) from e

        text = "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )
        if not text.strip():
            raise EmptyCompletionError(self.model, getattr(response, "stop_reason", None))

        usage = getattr(response, "usage", None)
        logger.debug(
            "guidance_completion",
            chars=len(text),
            stop_reason=getattr(response, "stop_reason", None),
            input_tokens=getattr(usage, "input_tokens", None),
            output_tokens=getattr(usage, "output_tokens", None),
        )
        return text

    async def generate(
        self,
        situation: str,
        preferences: GuidancePreferences,
        framework: Optional[str] = None,
        family_context: Optional[str] = None,
    ) -> GeneratedGuidance:
        mode = preferences.structure_mode
        prompt, version = self._prepare(situation, preferences, framework, family_context)

        raw = await self.complete(prompt.system, prompt.user)
        return GeneratedGuidance(
            raw=raw,
            response=parse(raw, mode),
            mode=mode,
            prompt_version=version,
        )

    async def stream(
        self,
        situation: str,
        preferences: GuidancePreferences,
        framework: Optional[str] = None,
        family_context: Optional[str] = None,
    ) -> AsyncIterator[GuidanceStreamEvent]:
        """Yield text deltas while Claude writes, then one event carrying the result.

        The accumulated text is parsed once, after the stream ends. Raises the
        same errors as generate(): GuidanceGenerationError for API failures and
        EmptyCompletionError when no text arrived.
        """
        mode = preferences.structure_mode
        prompt, version = self._prepare(situation, preferences, framework, family_context)

        chunks: list[str] = []
        try:
            async with self.client.messages.stream(**self._request(prompt)) as stream:
                async for text in stream.text_stream:
                    if not text:
                        continue
                    chunks.append(text)
                    yield GuidanceStreamEvent(delta=text)
        except anthropic.APIError as e:
            logger.error(
                "guidance_stream_error", model=self.model, error=str(e), received=len(chunks)
            )
            raise GuidanceGenerationError(f"Claude API stream failed: {e}", e) from e

        raw = "".join(chunks)
        if not raw.strip():
            raise EmptyCompletionError(self.model)

        logger.debug("guidance_streamed", chars=len(raw), chunks=len(chunks))
        yield GuidanceStreamEvent(
            result=GeneratedGuidance(
                raw=raw,
                response=parse(raw, mode),
                mode=mode,
                prompt_version=version,
            )
        )
