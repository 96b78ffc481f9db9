"""Service layer for business logic.

Services depend on protocols (interfaces), not concrete implementations,
making them testable with small fakes.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access)

Usage:
    ```python
    from kisah_ai.services import RequestResolver, ResponseCache, RuleEngine, SessionMemory

    resolver = RequestResolver(
        cache=ResponseCache.create(),
        sessions=SessionMemory(),
        rule_engine=RuleEngine(),
    )
    ```
"""

from .resolver import RequestResolver, extract_text
from .response_cache import ResponseCache, fingerprint
from .rule_engine import GENERIC_FALLBACK_MESSAGE, OFFLINE_MESSAGE, Rule, RuleEngine
from .session_memory import SessionMemory
from .streaming import StreamDeliveryAdapter, paced_fragments

__all__ = [
    "RequestResolver",
    "extract_text",
    "ResponseCache",
    "fingerprint",
    "RuleEngine",
    "Rule",
    "GENERIC_FALLBACK_MESSAGE",
    "OFFLINE_MESSAGE",
    "SessionMemory",
    "StreamDeliveryAdapter",
    "paced_fragments",
]
