"""Conversation title generation."""

import json
from typing import Optional

from tenacity import AsyncRetrying, stop_after_attempt, wait_fixed

from ..providers.base import CompletionClient
from ..utils.logger import get_logger

FALLBACK_TITLE = "Helping with SQL queries"

SYSTEM_PROMPT = (
    'You are a helpful assistant designed to output JSON a unique key "title" '
    "with a title based on user message."
)


class TitleGenerator:
    """Asks the completion model for a short title, falling back to a fixed one."""

    def __init__(
        self,
        completion: CompletionClient,
        model: Optional[str] = None,
        max_attempts: int = 3,
        retry_delay: float = 2.0
    ):
        self.completion = completion
        self.model = model
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.logger = get_logger("titles")

    async def generate(self, message: str) -> str:
        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {
                "role": "user",
                "content": (
                    f'The user message is: "{message}", create a title. '
                    f'And return the same object structure: {json.dumps({"title": ""})}'
                ),
            },
        ]

        try:
            async for attempt in self._retrying():
                with attempt:
                    return await self._request_title(messages, attempt.retry_state.attempt_number)
        except Exception as e:
            self.logger.error(f"Title generation gave up after {self.max_attempts} attempts: {e}")

        return FALLBACK_TITLE

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            reraise=True,
            stop=stop_after_attempt(max(1, self.max_attempts)),
            wait=wait_fixed(self.retry_delay),
        )

    async def _request_title(self, messages, attempt_number: int) -> str:
        """
        Ask for a title once.

        Raises:
            ValueError: If the response holds no usable title
        """
        try:
            response = await self.completion.complete(messages, model=self.model, json_mode=True)
            data = json.loads(response)
        except Exception as e:
            self.logger.warning(f"Title attempt {attempt_number} failed: {e}")
            raise

        title = data.get("title") if isinstance(data, dict) else None
        if not isinstance(title, str) or not title.strip():
            self.logger.warning(f"Title attempt {attempt_number} returned no title")
            raise ValueError("response has no title")
        return title.strip()
