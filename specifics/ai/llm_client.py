"""
OpenAI chat client for vision analysis and grounded JSON answers.
"""
import json
import logging
import re
from typing import Any, Optional, Sequence, Type, TypeVar

from openai import OpenAI
from pydantic import BaseModel

from ..config import get_config


logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$")


class LLMClient:
    """
    Chat completions in JSON mode, parsed into pydantic models.
    Photos travel as image_url parts ahead of the text prompt.
    """

    def __init__(self, model: Optional[str] = None, client: Optional[Any] = None):
        config = get_config()
        self.model = model or config.openai.model

        if client is not None:
            self.client = client
        elif config.openai.api_key:
            self.client = OpenAI(api_key=config.openai.api_key)
        else:
            logger.warning("OPENAI_API_KEY missing, analysis disabled")
            self.client = None

    def is_available(self) -> bool:
        return self.client is not None

    @staticmethod
    def _user_content(text: str, image_urls: Sequence[str], detail: str) -> Any:
        if not image_urls:
            return text
        parts: list[dict[str, Any]] = [
            {"type": "image_url", "image_url": {"url": url, "detail": detail}}
            for url in image_urls
        ]
        parts.append({"type": "text", "text": text})
        return parts

    def _complete(self, messages: list[dict[str, Any]], temperature: float, max_tokens: int) -> str:
        if self.client is None:
            raise RuntimeError("LLM client not configured")

        response = self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
            response_format={"type": "json_object"},
        )
        return response.choices[0].message.content or "{}"

    def call_with_schema(
        self,
        system_prompt: str,
        user_prompt: str,
        response_model: Type[T],
        temperature: float = 0.1,
        max_tokens: int = 1400,
        image_urls: Sequence[str] = (),
        image_detail: str = "low",
    ) -> T:
        """
        Ask for a JSON object and validate it as `response_model`.

        Args:
            image_urls: Hosted or data: URLs, sent before the prompt text
            image_detail: OpenAI vision detail level ("low" keeps cost flat)

        Raises:
            json.JSONDecodeError: The answer is not JSON
            ValidationError: The JSON does not fit the model
            RuntimeError: No client configured
        """
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": self._user_content(user_prompt, image_urls, image_detail)},
        ]
        text = self._complete(messages, temperature, max_tokens)

        try:
            data = json.loads(_FENCE.sub("", text.strip()))
        except json.JSONDecodeError as e:
            logger.error(f"Model answer is not JSON ({len(text)} chars): {e}")
            raise

        return response_model.model_validate(data)
