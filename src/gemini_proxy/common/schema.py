"""Pydantic models and dataclasses for request/response types."""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class GenerationConfigPayload(BaseModel):
    """Caller-supplied model settings, forwarded to Gemini untouched."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    system_instruction: Any = Field(default=None, alias="systemInstruction")
    generation_config: Any = Field(default=None, alias="generationConfig")


class GenerationRequest(BaseModel):
    prompt: str
    mode: str
    config: GenerationConfigPayload | None = None


class GenerationResponse(BaseModel):
    text: str
    mode: str | None = None


@dataclass
class ProxyResult:
    """Status and JSON body to send back; body is None for an empty response."""
    status_code: int
    body: dict[str, Any] | None = None
