"""
LLM provider for OpenAI-compatible endpoints.

Works against Ollama, vLLM or the OpenAI API itself; the endpoint is chosen
by ``LLMProviderConfig.base_url``.
"""

import json
import logging
import re
from typing import Any, cast

from openai import APIConnectionError, APITimeoutError, AsyncOpenAI

from missionguard.config import LLMProviderConfig
from missionguard.domain.exceptions import ProviderUnavailable
from missionguard.domain.interfaces import LLMProviderInterface

logger = logging.getLogger(__name__)

JSON_SYSTEM_PROMPT = (
    "You are a software engineering assistant. Respond with a single JSON "
    "document in a markdown block:\n```json\n{}\n```"
)


def extract_json(content: str) -> Any:
    """Parse the JSON document contained in a completion.

    Raises:
        ValueError: If no parseable JSON is found
    """
    if not content or content.isspace():
        raise ValueError("Empty completion")

    # Try json block
    match = re.search(r"```json\s*\n(.*?)\n\s*```", content, re.DOTALL)
    if match is None:
        # Try generic block
        match = re.search(r"```\s*\n(.*?)\n\s*```", content, re.DOTALL)
    candidate = match.group(1) if match else content.strip()

    try:
        return json.loads(candidate)
    except json.JSONDecodeError as e:
        logger.debug(f"Completion is not plain JSON, searching for an object: {e}")

    # Fall back to the outermost object in the text
    start, end = candidate.find("{"), candidate.rfind("}")
    if start != -1 and end > start:
        try:
            return json.loads(candidate[start : end + 1])
        except json.JSONDecodeError as e:
            raise ValueError(f"Completion is not valid JSON: {e}") from e
    raise ValueError("No JSON document found in completion")


class OpenAICompatibleProvider(LLMProviderInterface):
    """Connects to an OpenAI-compatible chat completion API."""

    config_class = LLMProviderConfig

    def __init__(self, config: LLMProviderConfig | None = None, **kwargs: Any):
        """
        Args:
            config: Typed configuration object (preferred)
            **kwargs: Fields of LLMProviderConfig when no config is given
        """
        if config is None:
            config = LLMProviderConfig(**kwargs)
        self.config = config
        self._client = AsyncOpenAI(
            base_url=config.base_url,
            api_key=config.api_key,
            timeout=config.timeout,
        )

    async def prompt_text(self, system: str, user: str) -> str:
        messages = [
            {"role": "system", "content": system},
            {"role": "user", "content": user},
        ]
        try:
            response = await self._client.chat.completions.create(
                model=self.config.model,
                messages=cast(Any, messages),
                temperature=self.config.temperature,
            )
        except (APIConnectionError, APITimeoutError) as e:
            logger.warning(f"LLM endpoint {self.config.base_url} unavailable: {e}")
            raise ProviderUnavailable(
                f"LLM provider at {self.config.base_url} unavailable: {e}"
            ) from e
        return response.choices[0].message.content or ""

    async def prompt_json(self, prompt: str, system: str | None = None) -> Any:
        content = await self.prompt_text(system or JSON_SYSTEM_PROMPT, prompt)
        return extract_json(content)
