"""
REST API for guidance structuring.

POST  /v1/guidance/parse           - structure a stored or received raw model reply
POST  /v1/guidance/generate        - ask Claude for guidance and structure the reply
POST  /v1/guidance/generate/stream - same, streamed as newline-delimited JSON
GET   /v1/preferences              - current guidance preferences
PATCH /v1/preferences              - change guidance preferences
"""
import json
from functools import lru_cache
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from parentguidance.config import settings
from parentguidance.exceptions import (
    EmptyCompletionError,
    GuidanceGenerationError,
    PreferenceStoreError,
)
from parentguidance.logging_config import get_logger
from parentguidance.services.guidance.engine import parse
from parentguidance.services.guidance.generator import (
    GeneratedGuidance,
    GuidanceGenerator,
    GuidanceStreamEvent,
)
from parentguidance.services.guidance.preferences import (
    GuidancePreferences,
    PreferenceStore,
)
from parentguidance.services.guidance.prompts import format_framework
from parentguidance.services.guidance.schemas import (
    GuidanceStyle,
    ResponseView,
    StructuralMode,
)

logger = get_logger(__name__)

router = APIRouter(tags=["guidance"])


# ── Dependencies ─────────────────────────────────────────────────────────────

@lru_cache
def get_preference_store() -> PreferenceStore:
    defaults = GuidancePreferences(structure_mode=StructuralMode(settings.DEFAULT_STRUCTURE_MODE))
    return PreferenceStore(settings.PREFERENCES_PATH, defaults=defaults)


@lru_cache
def get_generator() -> GuidanceGenerator:
    return GuidanceGenerator()


# ── Request / Response schemas ──────────────────────────────────────────────

class ParseRequest(BaseModel):
    raw: str
    mode: Optional[StructuralMode] = None   # defaults to the stored preference


class FrameworkIn(BaseModel):
    name: str
    description: Optional[str] = None
    principles: list[str] = Field(default_factory=list)
    tools: list[str] = Field(default_factory=list)


class GenerateRequest(BaseModel):
    situation: str = Field(min_length=1)
    framework: Optional[FrameworkIn] = None
    family_context: Optional[str] = None


class GenerateResponse(BaseModel):
    raw: str
    mode: StructuralMode
    prompt_version: str
    guidance: ResponseView


class PreferencesPatch(BaseModel):
    structure_mode: Optional[StructuralMode] = None
    style: Optional[GuidanceStyle] = None
    enable_child_context: Optional[bool] = None
    enable_key_insights: Optional[bool] = None


# ── Endpoints ────────────────────────────────────────────────────────────────

@router.post("/v1/guidance/parse", response_model=ResponseView)
async def parse_guidance(
    body: ParseRequest,
    store: PreferenceStore = Depends(get_preference_store),
):
    mode = body.mode or store.snapshot().structure_mode
    return ResponseView.of(parse(body.raw, mode))


def _framework_block(body: GenerateRequest) -> Optional[str]:
    if not body.framework:
        return None
    return format_framework(
        body.framework.name,
        description=body.framework.description,
        principles=body.framework.principles,
        tools=body.framework.tools,
    )


def _generate_response(result: GeneratedGuidance) -> GenerateResponse:
    return GenerateResponse(
        raw=result.raw,
        mode=result.mode,
        prompt_version=result.prompt_version,
        guidance=ResponseView.of(result.response),
    )


@router.post("/v1/guidance/generate", response_model=GenerateResponse)
async def generate_guidance(
    body: GenerateRequest,
    store: PreferenceStore = Depends(get_preference_store),
    generator: GuidanceGenerator = Depends(get_generator),
):
    try:
        result = await generator.generate(
            body.situation,
            store.snapshot(),
            framework=_framework_block(body),
            family_context=body.family_context,
        )
    except (GuidanceGenerationError, EmptyCompletionError) as e:
        raise HTTPException(502, detail=e.message)

    return _generate_response(result)


@router.post("/v1/guidance/generate/stream")
async def stream_guidance(
    body: GenerateRequest,
    store: PreferenceStore = Depends(get_preference_store),
    generator: GuidanceGenerator = Depends(get_generator),
):
    """Newline-delimited JSON: {"type": "delta"} lines, then one "guidance" or "error" line.

    A failure before the first event is still reported as a 502.
    """
    events = generator.stream(
        body.situation,
        store.snapshot(),
        framework=_framework_block(body),
        family_context=body.family_context,
    )
    try:
        first = await anext(events)
    except (GuidanceGenerationError, EmptyCompletionError) as e:
        raise HTTPException(502, detail=e.message)

    async def ndjson():
        yield _event_line(first)
        try:
            async for event in events:
                yield _event_line(event)
        except (GuidanceGenerationError, EmptyCompletionError) as e:
            logger.warning("guidance_stream_aborted", error=e.message)
            yield json.dumps({"type": "error", "detail": e.message}) + "\n"

    return StreamingResponse(ndjson(), media_type="application/x-ndjson")


def _event_line(event: GuidanceStreamEvent) -> str:
    if event.result is None:
        return json.dumps({"type": "delta", "text": event.delta}) + "\n"
    payload = _generate_response(event.result).model_dump(mode="json")
    return json.dumps({"type": "guidance", **payload}) + "\n"


@router.get("/v1/preferences", response_model=GuidancePreferences)
async def get_preferences(store: PreferenceStore = Depends(get_preference_store)):
    return store.snapshot()


# Sync handler: store.update does blocking file I/O and runs in the threadpool.
@router.patch("/v1/preferences", response_model=GuidancePreferences)
def update_preferences(
    body: PreferencesPatch,
    store: PreferenceStore = Depends(get_preference_store),
):
    changes = body.model_dump(exclude_none=True)
    if not changes:
        return store.snapshot()
    try:
        return store.update(**changes)
    except PreferenceStoreError as e:
        logger.error("preferences_save_failed", **e.details)
        raise HTTPException(500, detail=e.message)
