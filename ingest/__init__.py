from .base import (
    FetchError,
    FetchResult,
    HandleNotFound,
    MalformedResponse,
    TransportFailure,
    default_adapters,
    get_adapter,
)
from .codeforces import CodeforcesAdapter
from .handles import normalize_handle
from .leetcode import LeetCodeAdapter

__all__ = [
    "CodeforcesAdapter",
    "FetchError",
    "FetchResult",
    "HandleNotFound",
    "LeetCodeAdapter",
    "MalformedResponse",
    "TransportFailure",
    "default_adapters",
    "get_adapter",
    "normalize_handle",
]
