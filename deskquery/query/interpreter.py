"""Model-backed query interpretation and grounded question answering."""

import json
import logging
import re
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from deskquery.context import ContextBuilder
from deskquery.errors import DeskQueryError, ModelError, ModelErrorKind
from deskquery.llm.base import LLMProvider

from .models import ConversationContext, Intent
from .prompts import (
    INTERPRET_SYSTEM_PROMPT,
    RECOGNIZED_FILTER_KEYS,
    conversation_hint,
    grounding_hint,
    interpret_user_prompt,
)

logger = logging.getLogger(__name__)

_FENCED_JSON = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL)


class ModelInterpretation(BaseModel):
    """Schema the model's JSON reply must satisfy."""

    intent: Intent
    filters: dict[str, Any] = Field(default_factory=dict)
    confidence: float
    reasoning: str = "Model interpretation"

    @field_validator("intent", mode="before")
    @classmethod
    def _parse_intent(cls, value: Any) -> Intent:
        if not isinstance(value, str):
            raise ValueError("intent must be a string")
        return Intent.parse(value)

    @field_validator("filters")
    @classmethod
    def _drop_unknown_filters(cls, value: dict[str, Any]) -> dict[str, Any]:
        return {k: v for k, v in value.items() if k in RECOGNIZED_FILTER_KEYS and v not in (None, "", [])}

    @field_validator("confidence")
    @classmethod
    def _clamp_confidence(cls, value: float) -> float:
        return min(1.0, max(0.0, value))


def _extract_json(text: str) -> str:
    match = _FENCED_JSON.search(text)
    return match.group(1) if match else text.strip()


class ModelInterpreter:
    """Asks the language model for a structured interpretation of a query."""

    def __init__(
        self,
        llm_provider: LLMProvider,
        context_builder: ContextBuilder | None = None,
        temperature: float = 0.3,
        max_tokens: int = 500,
    ):
        """Initialize the interpreter.

        Args:
            llm_provider: Provider used for the completion
            context_builder: Optional source of a dataset overview for the prompt
            temperature: Sampling temperature, low for consistent parsing
            max_tokens: Completion token budget
        """
        self.llm_provider = llm_provider
        self.context_builder = context_builder
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def _system_prompt(self) -> str:
        if self.context_builder is None:
            return INTERPRET_SYSTEM_PROMPT
        try:
            context = await self.context_builder.get_context()
        except DeskQueryError as e:
            logger.debug(f"Interpreting without dataset overview: {e}")
            return INTERPRET_SYSTEM_PROMPT
        return INTERPRET_SYSTEM_PROMPT + grounding_hint(context.stats_summary)

    async def ask_model(self, query: str) -> ModelInterpretation:
        """Interpret ``query`` with the model.

        Raises:
            ModelError: If the provider fails or the reply does not match
                the expected schema
        """
        system_prompt = await self._system_prompt()
        try:
            result = await self.llm_provider.generate_response(
                prompt=interpret_user_prompt(query),
                system_prompt=system_prompt,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except ModelError:
            raise
        except Exception as e:
            raise ModelError(f"Model call failed: {e}") from e

        try:
            data = json.loads(_extract_json(result.content))
            interpretation = ModelInterpretation.model_validate(data)
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Unusable interpretation from {result.model}: {e}")
            raise ModelError(
                f"Invalid response format from model: {e}",
                kind=ModelErrorKind.INVALID_RESPONSE,
            ) from e

        logger.info(
            f"Model interpreted query as {interpretation.intent.value} "
            f"({interpretation.confidence:.0%} confidence)"
        )
        return interpretation


class GroundedAnswerer:
    """Answers questions in natural language, grounded in the snapshot."""

    def __init__(
        self,
        llm_provider: LLMProvider,
        context_builder: ContextBuilder,
        temperature: float = 0.7,
        max_tokens: int = 1500,
    ):
        self.llm_provider = llm_provider
        self.context_builder = context_builder
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def answer(self, query: str, conversation: ConversationContext | None = None) -> str:
        """Answer ``query`` using the full snapshot as context.

        Raises:
            SnapshotUnavailableError: If there is no snapshot to ground on
            ModelError: If the provider fails or returns nothing
        """
        system_prompt = await self.context_builder.build_system_prompt()
        if conversation is not None:
            system_prompt += conversation_hint(conversation.previous_query, conversation.item_ids)

        try:
            result = await self.llm_provider.generate_response(
                prompt=query,
                system_prompt=system_prompt,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except ModelError:
            raise
        except Exception as e:
            raise ModelError(f"Model call failed: {e}") from e

        answer = result.content.strip()
        if not answer:
            raise ModelError("Model returned an empty answer", kind=ModelErrorKind.INVALID_RESPONSE)
        return answer
