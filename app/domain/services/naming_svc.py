# app/domain/services/naming_svc.py

from __future__ import annotations
from typing import Optional, Protocol, Tuple
import json
import logging
import re
from time import monotonic as _now

from openai import AsyncOpenAI
from pydantic import BaseModel, Field, ValidationError

from app.core.config import Settings
from app.domain.models.product import ProductType
from app.domain.services.prompts import system_prompt, user_task

logger = logging.getLogger(__name__)

PLACEHOLDER_DESCRIPTION = "AI Generated Description..."


def placeholder_name(qr_code_id: str) -> str:
    return f"AI Generated Name for {qr_code_id}"


class ProductNamer(Protocol):
    """Produces (name, description) for a new product."""

    async def generate(self, qr_code_id: str, product_type: ProductType) -> Tuple[str, str]:
        ...


class StubProductNamer:
    """Deterministic placeholder text derived from the QR code."""

    async def generate(self, qr_code_id: str, product_type: ProductType) -> Tuple[str, str]:
        return placeholder_name(qr_code_id), PLACEHOLDER_DESCRIPTION


# =============================================================================
#                               OPENAI BACKEND
# =============================================================================

class NamingResponse(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=2000)


# Regex to strip code fences (``` or ```json) from LLM output
_CODE_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.MULTILINE)


def _parse_and_validate(json_text: str) -> NamingResponse:
    """Raises ValueError when the LLM output is not the expected JSON object."""
    try:
        raw = _CODE_FENCE_RE.sub("", json_text).strip()
        return NamingResponse.model_validate(json.loads(raw))
    except (json.JSONDecodeError, ValidationError) as e:
        raise ValueError(f"Invalid LLM JSON: {e}") from e


class OpenAIProductNamer:
    """
    Chat-completion backed namer.
    Errors propagate: the caller decides on the fallback.
    """

    def __init__(
        self,
        client: AsyncOpenAI,
        *,
        model: str,
        timeout_s: float,
        max_tokens: int = 200,
    ):
        self.client = client
        self.model = model
        self.timeout_s = timeout_s
        self.max_tokens = max_tokens

    async def generate(self, qr_code_id: str, product_type: ProductType) -> Tuple[str, str]:
        messages = [
            {"role": "system", "content": system_prompt()},
            {"role": "user", "content": user_task(qr_code_id, product_type)},
        ]
        t0 = _now()
        resp = await self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            max_tokens=self.max_tokens,
            temperature=0.2,
            timeout=self.timeout_s,
            response_format={"type": "json_object"},
        )
        logger.info(f"LLM naming call model={getattr(resp, 'model', self.model)} duration={_now() - t0:.3f}s")
        parsed = _parse_and_validate(resp.choices[0].message.content or "")
        return parsed.name.strip(), parsed.description.strip()


_client: Optional[AsyncOpenAI] = None


def build_namer(settings: Settings) -> ProductNamer:
    """Pick the namer configured by NAMING_BACKEND."""
    global _client
    if settings.NAMING_BACKEND == "openai" and settings.OPENAI_API_KEY:
        if _client is None:
            _client = AsyncOpenAI(api_key=settings.OPENAI_API_KEY)
        return OpenAIProductNamer(
            _client,
            model=settings.OPENAI_NAMING_MODEL,
            timeout_s=settings.naming_timeout_s,
            max_tokens=settings.naming_max_tokens,
        )
    return StubProductNamer()
