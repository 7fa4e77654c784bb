"""HTTP chat session over the turn endpoint."""

from typing import AsyncIterator, Dict, List, Optional, Sequence, Tuple

import httpx

from .consumer import DisplayMessage, StreamConsumer

TURNS_PATH = "/api/v1/conversations/turns"

# (filename, content, content type)
Attachment = Tuple[str, bytes, str]


class ChatSession:
    """Sends turns for one conversation and keeps the displayed history.

    The conversation id assigned by the first turn is reused for every
    later turn.
    """

    def __init__(
        self,
        user_id: str,
        base_url: str = "http://localhost:7788",
        conversation_id: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None
    ):
        self.user_id = user_id
        self.conversation_id = conversation_id
        self.history: List[DisplayMessage] = []
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def send(self, text: str, files: Sequence[Attachment] = ()) -> StreamConsumer:
        """
        Send one user message and consume the streamed turn.

        Args:
            text: User message
            files: Attachments to upload with the message

        Returns:
            The consumer holding this turn's messages
        """
        consumer = StreamConsumer(self.conversation_id)
        consumer.add_user_message(text, [name for name, _, _ in files])

        data: Dict[str, str] = {"text": text}
        if self.conversation_id:
            data["conversationId"] = self.conversation_id
        upload = [("file", (name, content, content_type)) for name, content, content_type in files]

        await consumer.consume(self._stream(data, upload))

        if self.conversation_id is None and consumer.conversation_id:
            self.conversation_id = consumer.conversation_id
        self.history.extend(consumer.message_list)
        return consumer

    async def _stream(self, data: Dict[str, str], upload) -> AsyncIterator[bytes]:
        async with self.client.stream(
            "POST",
            TURNS_PATH,
            data=data,
            files=upload or None,
            headers={"X-User-Id": self.user_id},
        ) as response:
            if response.status_code >= 400:
                await response.aread()
                response.raise_for_status()
            async for chunk in response.aiter_bytes():
                yield chunk

    async def aclose(self):
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
