# services/gemini.py
from __future__ import annotations

import asyncio
import logging
import threading
from functools import lru_cache
from typing import Any

import aiohttp
import httpx
from google import genai
from google.genai import types, errors as gerrors
from pydantic import ValidationError

from config import settings
from core.errors import ModelResponseError
from core.models.meal import CandidateMeal
from core.prompt_builder import SYSTEM_PROMPT

_LOG = logging.getLogger(__name__)

TOOL_NAME = "create_meal"

# API errors plus SDK-side failures raised as ValueError rather than APIError
_SDK_ERRORS = (
    gerrors.APIError,
    gerrors.UnknownApiResponseError,
    gerrors.UnknownFunctionCallArgumentError,
    gerrors.UnsupportedFunctionError,
    gerrors.FunctionInvocationError,
)
# transport failures from either async backend (httpx or aiohttp) and raw sockets
_TRANSPORT_ERRORS = (httpx.HTTPError, aiohttp.ClientError, OSError)

# ───────────── Function schema (the only channel we accept) ─────────────
_S = types.Schema
_T = types.Type

CREATE_MEAL_FN = types.FunctionDeclaration(
    name=TOOL_NAME,
    description="Create a structured meal plan with nutritional information",
    parameters=_S(
        type=_T.OBJECT,
        properties={
            "title": _S(type=_T.STRING, description="Name of the meal"),
            "description": _S(type=_T.STRING, description="Brief description of the meal"),
            "ingredients": _S(
                type=_T.ARRAY,
                description="List of ingredients with quantities",
                items=_S(
                    type=_T.OBJECT,
                    properties={
                        "name": _S(type=_T.STRING),
                        "quantity": _S(type=_T.NUMBER),
                        "unit": _S(type=_T.STRING),
                    },
                    required=["name", "quantity", "unit"],
                ),
            ),
            "instructions": _S(
                type=_T.ARRAY,
                description="Step-by-step cooking instructions",
                items=_S(type=_T.STRING),
            ),
            "calories": _S(type=_T.NUMBER, description="Total calories"),
            "protein_g": _S(type=_T.NUMBER, description="Grams of protein"),
            "carbs_g": _S(type=_T.NUMBER, description="Grams of carbohydrates"),
            "fat_g": _S(type=_T.NUMBER, description="Grams of fat"),
            "cook_time_minutes": _S(type=_T.NUMBER, description="Total cook time in minutes"),
            "cuisine": _S(type=_T.STRING, description="Cuisine type (e.g., Italian, Mexican, Japanese)"),
        },
        required=[
            "title", "description", "ingredients", "instructions", "calories",
            "protein_g", "carbs_g", "fat_g", "cook_time_minutes", "cuisine",
        ],
    ),
)


# ───────────── Client adapter ─────────────
class GeminiMealClient:
    """
    One forced `create_meal` function call per `create_meal()` – no retries.

    The SDK client is built on first use and reused for the life of the
    process; construction is guarded so concurrent first calls build it once.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        timeout_s: float | None = None,
        client: Any | None = None,
    ) -> None:
        self._api_key = api_key if api_key is not None else settings.gemini_api_key
        self.model = model or settings.gemini_model
        self._timeout_s = timeout_s if timeout_s is not None else settings.gemini_timeout_seconds
        self._client = client
        self._lock = threading.Lock()

    def _handle(self) -> Any:
        if self._client is None:
            with self._lock:
                if self._client is None:
                    if not self._api_key:
                        raise ModelResponseError("GEMINI_API_KEY is not configured")
                    self._client = genai.Client(api_key=self._api_key)
        return self._client

    def _config(self) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            system_instruction=SYSTEM_PROMPT,
            temperature=settings.gemini_temperature,
            max_output_tokens=settings.gemini_max_output_tokens,
            tools=[types.Tool(function_declarations=[CREATE_MEAL_FN])],
            tool_config=types.ToolConfig(
                function_calling_config=types.FunctionCallingConfig(
                    mode="ANY",
                    allowed_function_names=[TOOL_NAME],
                )
            ),
            automatic_function_calling=types.AutomaticFunctionCallingConfig(disable=True),
        )

    async def create_meal(self, prompt: str) -> CandidateMeal:
        client = self._handle()
        try:
            resp = await asyncio.wait_for(
                client.aio.models.generate_content(
                    model=self.model,
                    contents=[prompt],
                    config=self._config(),
                ),
                timeout=self._timeout_s,
            )
        except asyncio.TimeoutError as exc:
            raise ModelResponseError(
                f"Gemini did not answer within {self._timeout_s:g}s"
            ) from exc
        except _SDK_ERRORS as exc:
            _LOG.error("Gemini call failed: %s", exc)
            raise ModelResponseError(f"Gemini request failed: {exc}") from exc
        except _TRANSPORT_ERRORS as exc:
            _LOG.error("Gemini transport error: %r", exc)
            raise ModelResponseError(f"Gemini unreachable: {exc!r}") from exc

        call = next(
            (fc for fc in (resp.function_calls or []) if fc.name == TOOL_NAME),
            None,
        )
        if call is None:
            raise ModelResponseError(f"AI did not return a {TOOL_NAME} function call")

        try:
            return CandidateMeal.model_validate(dict(call.args or {}))
        except ValidationError as exc:
            _LOG.warning("create_meal arguments did not match the schema: %s", exc)
            raise ModelResponseError(
                f"{TOOL_NAME} arguments did not match the meal schema"
            ) from exc


# ───────────── Process-wide instance (FastAPI dependency) ─────────────
@lru_cache
def get_meal_client() -> GeminiMealClient:
    return GeminiMealClient()
