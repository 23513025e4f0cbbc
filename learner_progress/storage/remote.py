"""
Remote document store - one JSON document per (user, domain).

Adapters raise RemoteUnavailable on any transport or server failure; the sync
coordinator decides what to do with it. A missing document is not an error:
fetch returns None.
"""

import copy
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Set, Tuple

import httpx

from learner_progress.kernel.errors import RemoteUnavailable
from learner_progress.logging_config import get_logger
from learner_progress.schemas.snapshots import Domain

logger = get_logger(__name__)

Document = Dict[str, Any]


class RemoteStore(ABC):
    """Per-user, per-domain document storage."""

    @abstractmethod
    async def fetch(self, domain: Domain, user_id: str) -> Optional[Document]:
        ...

    @abstractmethod
    async def update(self, domain: Domain, user_id: str, payload: Document) -> None:
        ...

    @abstractmethod
    async def unlock_achievement(self, user_id: str, achievement_id: str) -> None:
        ...

    async def aclose(self) -> None:
        pass


class NullRemoteStore(RemoteStore):
    """Demo mode: nothing is ever stored remotely."""

    async def fetch(self, domain: Domain, user_id: str) -> Optional[Document]:
        return None

    async def update(self, domain: Domain, user_id: str, payload: Document) -> None:
        return None

    async def unlock_achievement(self, user_id: str, achievement_id: str) -> None:
        return None


class InMemoryRemoteStore(RemoteStore):
    """
    Dict-backed remote store. Failures can be switched on per operation
    ("fetch", "update", "unlock") to exercise offline behaviour.
    """

    def __init__(self, documents: Optional[Dict[Tuple[str, str], Document]] = None):
        self.documents: Dict[Tuple[str, str], Document] = dict(documents or {})
        self.unlocked: Dict[str, Set[str]] = {}
        self.calls: List[Tuple[str, str, str]] = []
        self.failing: Set[str] = set()

    def fail(self, *operations: str) -> None:
        self.failing.update(operations)

    def recover(self) -> None:
        self.failing.clear()

    def put_document(self, domain: Domain, user_id: str, payload: Document) -> None:
        self.documents[(Domain(domain).value, user_id)] = copy.deepcopy(payload)

    def get_document(self, domain: Domain, user_id: str) -> Optional[Document]:
        return copy.deepcopy(self.documents.get((Domain(domain).value, user_id)))

    def _check(self, operation: str, domain: Optional[Domain], target: str) -> None:
        self.calls.append((operation, domain.value if domain else "", target))
        if operation in self.failing:
            raise RemoteUnavailable(operation, domain.value if domain else None)

    async def fetch(self, domain: Domain, user_id: str) -> Optional[Document]:
        self._check("fetch", domain, user_id)
        return self.get_document(domain, user_id)

    async def update(self, domain: Domain, user_id: str, payload: Document) -> None:
        self._check("update", domain, user_id)
        self.put_document(domain, user_id, payload)

    async def unlock_achievement(self, user_id: str, achievement_id: str) -> None:
        self._check("unlock", None, achievement_id)
        self.unlocked.setdefault(user_id, set()).add(achievement_id)


class HttpRemoteStore(RemoteStore):
    """
    REST adapter.

    GET/PUT {base_url}/users/{user_id}/{domain}
    PUT     {base_url}/users/{user_id}/achievements/{achievement_id}
    """

    def __init__(
        self,
        base_url: str,
        *,
        api_token: str = "",
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        headers = {"Accept": "application/json"}
        if api_token:
            headers["Authorization"] = f"Bearer {api_token}"
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
        )

    async def _send(self, operation: str, domain: Optional[str], method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self.client.request(method, url, **kwargs)
            if method == "GET" and response.status_code == 404:
                return response
            response.raise_for_status()
            return response
        except httpx.HTTPError as e:
            raise RemoteUnavailable(operation, domain, e) from e

    async def fetch(self, domain: Domain, user_id: str) -> Optional[Document]:
        domain = Domain(domain)
        response = await self._send("fetch", domain.value, "GET", f"/users/{user_id}/{domain.value}")
        if response.status_code == 404:
            logger.debug("No remote document", extra={"domain": domain.value})
            return None
        try:
            payload = response.json()
        except ValueError as e:
            raise RemoteUnavailable("fetch", domain.value, e) from e
        if payload is None:
            return None
        if not isinstance(payload, dict):
            raise RemoteUnavailable("fetch", domain.value, ValueError("document is not an object"))
        return payload

    async def update(self, domain: Domain, user_id: str, payload: Document) -> None:
        domain = Domain(domain)
        await self._send("update", domain.value, "PUT", f"/users/{user_id}/{domain.value}", json=payload)

    async def unlock_achievement(self, user_id: str, achievement_id: str) -> None:
        await self._send(
            "unlock",
            Domain.ACHIEVEMENTS.value,
            "PUT",
            f"/users/{user_id}/achievements/{achievement_id}",
            json={"achievement_id": achievement_id},
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()
