# messaging_service/src/messaging_service/clients/messaging_client.py
from typing import Any, Dict, List, Optional
from uuid import UUID

import httpx

from ..exceptions import MessagingError
from ..logging_config import logger
from ..services.reconcile import ConversationFeed


class MessagingClientError(MessagingError):
    """The messaging API answered with an error status or could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class MessagingClient:
    """
    Async client for the messaging REST API, acting for one authenticated user.

    Use as ``async with MessagingClient(base_url, token) as client: ...``.
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers={"Authorization": f"Bearer {token}"},
            transport=transport,
            timeout=timeout,
        )

    async def __aenter__(self) -> "MessagingClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        try:
            response = await self._client.request(method, url, **kwargs)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            detail = e.response.text
            logger.error(f"{method} {url} failed with {e.response.status_code}: {detail}")
            raise MessagingClientError(
                f"Messaging API error: {detail}", status_code=e.response.status_code
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"{method} {url} could not be completed: {e}")
            raise MessagingClientError(f"Messaging API unreachable: {e}") from e

    async def list_conversations(self) -> List[Dict[str, Any]]:
        data = await self._request("GET", "/messages/conversations")
        return data["conversations"]

    async def get_conversation(self, conversation_id: UUID, limit: Optional[int] = None) -> Dict[str, Any]:
        """Returns ``{"conversation": ..., "messages": [...]}``."""
        params = {"limit": limit} if limit else None
        return await self._request("GET", f"/messages/conversations/{conversation_id}", params=params)

    async def create_conversation(
        self, shelter_id: UUID, message: str, pet_id: Optional[UUID] = None
    ) -> Dict[str, Any]:
        payload = {
            "shelter_id": str(shelter_id),
            "pet_id": str(pet_id) if pet_id else None,
            "message": message,
        }
        data = await self._request("POST", "/messages/conversations", json=payload)
        return data["conversation"]

    async def send_message(self, conversation_id: UUID, content: str) -> Dict[str, Any]:
        payload = {"conversation_id": str(conversation_id), "content": content}
        data = await self._request("POST", "/messages/send", json=payload)
        return data["message"]

    async def mark_read(self, conversation_id: UUID) -> int:
        data = await self._request(
            "POST", "/messages/read", json={"conversation_id": str(conversation_id)}
        )
        return data.get("updated", 0)

    async def update_status(self, conversation_id: UUID, status: str) -> Dict[str, Any]:
        data = await self._request(
            "PATCH", f"/messages/conversations/{conversation_id}", json={"status": status}
        )
        return data["conversation"]

    async def get_unread_count(self) -> int:
        """Badge counter; any failure is logged and reported as 0."""
        try:
            data = await self._request("GET", "/messages/unread-count")
            if not isinstance(data, dict):
                raise TypeError(f"unexpected unread-count body: {data!r}")
            return int(data.get("unread_count", 0))
        except (MessagingClientError, ValueError, TypeError) as e:
            logger.warning(f"Unread count unavailable, showing 0: {e}")
            return 0

    async def send(self, feed: ConversationFeed, content: str) -> Dict[str, Any]:
        """
        Optimistically append `content` to `feed`, then send it.

        On success the pending entry is replaced by the stored message; on
        failure it is removed and the error propagates so the caller can put
        the text back in the input.
        """
        token = feed.add_pending(content)
        try:
            message = await self.send_message(UUID(feed.conversation_id), content)
        except MessagingClientError:
            feed.discard(token)
            raise
        feed.confirm(token, message)
        return message
