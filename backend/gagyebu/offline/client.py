import asyncio
import json
from dataclasses import dataclass, field
from uuid import uuid4

import httpx

from gagyebu.core.logging import get_logger
from gagyebu.offline.notifications import (
    PushNotification,
    build_push_notification,
    notification_click_target,
)
from gagyebu.offline.strategies import (
    CURRENT_CACHES,
    DYNAMIC_CACHE,
    OFFLINE_MESSAGE,
    OFFLINE_TEXT,
    STATIC_CACHE,
    STATIC_FILES,
    SYNC_TAG,
    CacheStrategy,
    select_strategy,
    stale_cache_names,
)

logger = get_logger(__name__)

CACHE_HEADER = "x-gagyebu-cache"
_DROPPED_HEADERS = {"content-encoding", "content-length", "transfer-encoding"}


@dataclass
class CachedResponse:
    status_code: int
    headers: dict[str, str]
    content: bytes

    @classmethod
    def from_response(cls, response: httpx.Response) -> "CachedResponse":
        headers = {
            key: value
            for key, value in response.headers.items()
            if key.lower() not in _DROPPED_HEADERS
        }
        return cls(status_code=response.status_code, headers=headers, content=response.content)

    def to_response(self, request: httpx.Request) -> httpx.Response:
        headers = {**self.headers, CACHE_HEADER: "hit"}
        return httpx.Response(
            self.status_code,
            headers=headers,
            content=self.content,
            request=request,
        )


@dataclass
class PendingTransaction:
    id: str
    path: str
    payload: dict


class ResponseCache:
    """Named in-memory caches keyed by absolute request URL."""

    def __init__(self) -> None:
        self._stores: dict[str, dict[str, CachedResponse]] = {}

    def open(self, name: str) -> dict[str, CachedResponse]:
        return self._stores.setdefault(name, {})

    def names(self) -> list[str]:
        return list(self._stores)

    def delete(self, name: str) -> bool:
        return self._stores.pop(name, None) is not None

    def put(self, name: str, key: str, response: httpx.Response) -> None:
        self.open(name)[key] = CachedResponse.from_response(response)

    def match(self, key: str, cache_name: str | None = None) -> CachedResponse | None:
        if cache_name is not None:
            return self._stores.get(cache_name, {}).get(key)
        for store in self._stores.values():
            if key in store:
                return store[key]
        return None


@dataclass
class SyncResult:
    synced: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


class OfflineLedgerClient:
    def __init__(
        self,
        base_url: str,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        cache: ResponseCache | None = None,
        headers: dict[str, str] | None = None,
        timeout_seconds: float = 10.0,
    ):
        self.cache = cache or ResponseCache()
        self._client = httpx.AsyncClient(
            base_url=base_url,
            transport=transport,
            headers=headers,
            timeout=httpx.Timeout(timeout_seconds, connect=5.0),
        )
        self._pending: list[PendingTransaction] = []
        self._background: set[asyncio.Task] = set()
        self.notifications: list[PushNotification] = []

    async def __aenter__(self) -> "OfflineLedgerClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.drain()
        await self._client.aclose()

    async def install(self) -> int:
        cached = 0
        for path in STATIC_FILES:
            request = self._client.build_request("GET", path)
            try:
                response = await self._client.send(request)
            except httpx.TransportError as exc:
                logger.warning("offline_install_failed", path=path, error=str(exc))
                continue
            if response.is_success:
                self.cache.put(STATIC_CACHE, str(request.url), response)
                cached += 1
        return cached

    def activate(self) -> list[str]:
        removed = stale_cache_names(self.cache.names())
        for name in removed:
            self.cache.delete(name)
            logger.info("offline_cache_deleted", cache=name)
        for name in CURRENT_CACHES:
            self.cache.open(name)
        return removed

    async def get(self, path: str, params: dict | None = None) -> httpx.Response:
        request = self._client.build_request("GET", path, params=params)
        strategy = select_strategy(request.url.path)
        if strategy == CacheStrategy.CACHE_FIRST:
            return await self.cache_first(request)
        if strategy == CacheStrategy.NETWORK_FIRST:
            return await self.network_first(request)
        return await self.stale_while_revalidate(request)

    async def request(self, method: str, path: str, **kwargs) -> httpx.Response:
        if method.upper() == "GET":
            return await self.get(path, params=kwargs.get("params"))
        return await self._client.request(method, path, **kwargs)

    async def cache_first(self, request: httpx.Request) -> httpx.Response:
        key = str(request.url)
        cached = self.cache.match(key)
        if cached is not None:
            return cached.to_response(request)
        try:
            response = await self._client.send(request)
        except httpx.TransportError as exc:
            logger.warning("offline_cache_first_failed", url=key, error=str(exc))
            return self._offline_text(request)
        self.cache.put(STATIC_CACHE, key, response)
        return response

    async def network_first(self, request: httpx.Request) -> httpx.Response:
        key = str(request.url)
        try:
            response = await self._client.send(request)
        except httpx.TransportError as exc:
            logger.info("offline_network_first_fallback", url=key, error=str(exc))
            cached = self.cache.match(key)
            if cached is not None:
                return cached.to_response(request)
            return self._offline_json(request)
        if response.is_success:
            self.cache.put(DYNAMIC_CACHE, key, response)
        return response

    async def stale_while_revalidate(self, request: httpx.Request) -> httpx.Response:
        key = str(request.url)
        cached = self.cache.match(key, DYNAMIC_CACHE)
        if cached is None:
            response = await self._revalidate(request)
            return response or self._offline_text(request)
        task = asyncio.create_task(self._revalidate(request))
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return cached.to_response(request)

    async def _revalidate(self, request: httpx.Request) -> httpx.Response | None:
        key = str(request.url)
        try:
            response = await self._client.send(request)
        except httpx.TransportError as exc:
            logger.info("offline_revalidate_failed", url=key, error=str(exc))
            return None
        self.cache.put(DYNAMIC_CACHE, key, response)
        return response

    async def drain(self) -> None:
        if self._background:
            await asyncio.gather(*list(self._background))

    @property
    def pending_transactions(self) -> list[PendingTransaction]:
        return list(self._pending)

    def queue_transaction(self, path: str, payload: dict) -> str:
        pending_id = str(payload.get("id") or uuid4())
        self._pending.append(PendingTransaction(id=pending_id, path=path, payload=payload))
        return pending_id

    async def sync_pending_transactions(self) -> SyncResult:
        result = SyncResult()
        for pending in list(self._pending):
            try:
                response = await self._client.post(pending.path, json=pending.payload)
            except httpx.TransportError as exc:
                logger.warning("offline_sync_failed", pending_id=pending.id, error=str(exc))
                result.failed.append(pending.id)
                continue
            if response.is_success:
                self._pending.remove(pending)
                result.synced.append(pending.id)
            else:
                logger.warning(
                    "offline_sync_rejected",
                    pending_id=pending.id,
                    status_code=response.status_code,
                )
                result.failed.append(pending.id)
        return result

    async def handle_sync(self, tag: str) -> SyncResult | None:
        if tag != SYNC_TAG:
            return None
        return await self.sync_pending_transactions()

    def handle_push(self, data: bytes | str | None) -> PushNotification:
        notification = build_push_notification(data)
        self.notifications.append(notification)
        return notification

    def handle_notification_click(self, action: str | None) -> str | None:
        return notification_click_target(action)

    @staticmethod
    def _offline_text(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text=OFFLINE_TEXT, request=request)

    @staticmethod
    def _offline_json(request: httpx.Request) -> httpx.Response:
        body = json.dumps({"error": OFFLINE_TEXT, "message": OFFLINE_MESSAGE}, ensure_ascii=False)
        return httpx.Response(
            503,
            content=body.encode("utf-8"),
            headers={"Content-Type": "application/json"},
            request=request,
        )
