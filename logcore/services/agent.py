"""Role-bound LLM collaborator with free-text and structured generation.

A :class:`GenerationAgent` pairs an :class:`ILLMProvider` with the system
instructions of one role (initial analyzer, refiner, report formatter).
Structured calls describe the requested pydantic model as JSON Schema in
the prompt, then parse and validate the answer.  There is no retry: a
failed call or a schema violation raises :class:`GenerationError`, which is
terminal for the run.
"""

from __future__ import annotations

import json
import re
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from logcore.interfaces.llm_provider import ILLMProvider
from logcore.utils.errors import GenerationError
from logcore.utils.logging import get_logger

ModelT = TypeVar("ModelT", bound=BaseModel)

# Whole-response code fence.  Greedy and anchored so fences that appear
# inside a JSON string value (e.g. a markdown report) are left alone.
_JSON_FENCE_RE = re.compile(r"^```(?:json)?\s*\n?(.*)\n?\s*```$", re.DOTALL)


class GenerationAgent:
    """One LLM collaborator role.

    Parameters
    ----------
    name:
        Role identifier used in logs, e.g. ``"refinement-agent"``.
    instructions:
        System prompt for every call this agent makes.
    provider:
        Backend bound to the role's model.
    temperature, max_tokens:
        Sampling settings passed through on every call.
    """

    def __init__(
        self,
        name: str,
        instructions: str,
        provider: ILLMProvider,
        temperature: float = 0.2,
        max_tokens: int = 8000,
    ) -> None:
        self._name = name
        self._instructions = instructions
        self._provider = provider
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._logger = get_logger(__name__)

    @property
    def name(self) -> str:
        return self._name

    @property
    def provider(self) -> ILLMProvider:
        return self._provider

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def generate(self, prompt: str) -> str:
        """Return the model's free-text answer to *prompt*."""
        self._logger.debug("agent_generate", agent=self._name, prompt_chars=len(prompt))
        return await self._provider.complete(
            system_prompt=self._instructions,
            user_prompt=prompt,
            temperature=self._temperature,
            max_tokens=self._max_tokens,
        )

    async def generate_structured(self, prompt: str, schema: type[ModelT]) -> ModelT:
        """Return the model's answer to *prompt* parsed into *schema*.

        Raises
        ------
        GenerationError
            If the call fails, or the answer is not a JSON object that
            validates against *schema*.
        """
        self._logger.debug(
            "agent_generate_structured",
            agent=self._name,
            schema=schema.__name__,
            prompt_chars=len(prompt),
        )
        raw = await self._provider.complete(
            system_prompt=self._instructions,
            user_prompt=f"{prompt}\n\n{_schema_instructions(schema)}",
            temperature=self._temperature,
            max_tokens=self._max_tokens,
            json_output=True,
        )
        try:
            return schema.model_validate(parse_json_object(raw))
        except (json.JSONDecodeError, ValueError, ValidationError) as exc:
            self._logger.error(
                "structured_output_invalid",
                agent=self._name,
                schema=schema.__name__,
                error=str(exc),
            )
            raise GenerationError(
                message=f"{self._name} returned output that does not match "
                f"{schema.__name__}: {exc}",
                provider_name=self._provider.get_provider_name(),
            ) from exc


def parse_json_object(response: str) -> dict:
    """Extract a JSON object from an LLM response.

    Handles a markdown fence around the whole answer and preamble text
    before the opening brace.

    Raises
    ------
    json.JSONDecodeError
        If no valid JSON can be extracted.
    ValueError
        If the JSON is not an object.
    """
    text = response.strip()

    fence_match = _JSON_FENCE_RE.match(text)
    if fence_match:
        text = fence_match.group(1).strip()

    if not text.startswith("{"):
        brace_start = text.find("{")
        brace_end = text.rfind("}")
        if brace_start != -1 and brace_end > brace_start:
            text = text[brace_start : brace_end + 1]

    parsed = json.loads(text)
    if not isinstance(parsed, dict):
        raise ValueError("LLM response is not a JSON object")
    return parsed


def _schema_instructions(schema: type[BaseModel]) -> str:
    return (
        "Respond with only a JSON object (no markdown fences, no commentary) "
        "that conforms to this JSON Schema:\n"
        f"{json.dumps(schema.model_json_schema(), indent=2)}"
    )
