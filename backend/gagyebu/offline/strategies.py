"""Request routing rules for the offline-aware client.

GET requests are served with one of three policies chosen from the path
alone: static assets are cache-first, ledger API reads are network-first
and everything else is stale-while-revalidate.
"""

import re
from enum import Enum

STATIC_CACHE = "gaegyebu-static-v1"
DYNAMIC_CACHE = "gaegyebu-dynamic-v1"
CURRENT_CACHES = (STATIC_CACHE, DYNAMIC_CACHE)

STATIC_FILES = (
    "/",
    "/transactions",
    "/budget",
    "/analytics",
    "/reports",
    "/manifest.json",
    "/icon-192x192.png",
    "/icon-512x512.png",
)

API_CACHE_PATTERNS = (
    re.compile(r"^/api/transactions"),
    re.compile(r"^/api/budgets"),
    re.compile(r"^/api/households"),
)

SYNC_TAG = "background-sync-transactions"
OFFLINE_TEXT = "Offline"
OFFLINE_MESSAGE = "인터넷 연결을 확인해주세요"


class CacheStrategy(str, Enum):
    CACHE_FIRST = "cache-first"
    NETWORK_FIRST = "network-first"
    STALE_WHILE_REVALIDATE = "stale-while-revalidate"


def is_static_file(path: str) -> bool:
    return "." in path or path in STATIC_FILES


def is_api_request(path: str) -> bool:
    return any(pattern.search(path) for pattern in API_CACHE_PATTERNS)


def select_strategy(path: str) -> CacheStrategy:
    if is_static_file(path):
        return CacheStrategy.CACHE_FIRST
    if is_api_request(path):
        return CacheStrategy.NETWORK_FIRST
    return CacheStrategy.STALE_WHILE_REVALIDATE


def stale_cache_names(cache_names: list[str]) -> list[str]:
    return [name for name in cache_names if name not in CURRENT_CACHES]


def offline_manifest() -> dict:
    return {
        "static_cache": STATIC_CACHE,
        "dynamic_cache": DYNAMIC_CACHE,
        "static_files": list(STATIC_FILES),
        "api_cache_patterns": [pattern.pattern for pattern in API_CACHE_PATTERNS],
        "strategies": [strategy.value for strategy in CacheStrategy],
        "sync_tag": SYNC_TAG,
    }
