"""
Type definitions for fetch_transport_retry
"""
import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Literal, Optional, Protocol, Union


HttpVerb = Literal["get", "post", "put", "delete", "patch", "head", "options"]

# Verbs a RetryTransport exposes; fixed, not extensible at runtime
HTTP_VERBS: tuple[str, ...] = ("get", "post", "put", "delete", "patch", "head", "options")


class InvalidArgumentError(ValueError):
    """Raised when a RetryTransport is built with a missing or invalid argument."""


class VerbTransport(Protocol):
    """
    Contract of the transport wrapped by a RetryTransport.

    Each verb method accepts verb-defined arguments and returns an awaitable
    that either resolves with a response or raises. A raised exception that
    carries an HTTP status (``status``/``status_code``, directly or on its
    ``response``) means the server answered; anything else is treated as a
    connectivity failure.
    """

    def get(self, *args: Any, **kwargs: Any) -> Awaitable[Any]: ...

    def post(self, *args: Any, **kwargs: Any) -> Awaitable[Any]: ...

    def put(self, *args: Any, **kwargs: Any) -> Awaitable[Any]: ...

    def delete(self, *args: Any, **kwargs: Any) -> Awaitable[Any]: ...

    def patch(self, *args: Any, **kwargs: Any) -> Awaitable[Any]: ...

    def head(self, *args: Any, **kwargs: Any) -> Awaitable[Any]: ...

    def options(self, *args: Any, **kwargs: Any) -> Awaitable[Any]: ...

    def dispose(self) -> Optional[Awaitable[None]]: ...


@dataclass
class MethodPolicy:
    """Retry policy for a single HTTP verb"""

    retry_limit: int = 0
    """Maximum number of resends after the first attempt. 0 disables retry"""


@dataclass
class RetryTransportConfig:
    """RetryTransport configuration"""

    retry_timeout_ms: int = 0
    """Delay (ms) before a batch of queued calls is resent. Default: 0"""

    methods: dict[str, MethodPolicy] = field(default_factory=dict)
    """Per-verb retry policies. Verbs not listed pass straight through"""

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> "RetryTransportConfig":
        """
        Build a config from a plain options mapping.

        Accepts both ``retry_timeout``/``retry_limit`` and the camelCase
        ``retryTimeout``/``retryLimit`` keys.

        Example:
            RetryTransportConfig.from_dict(
                {"retry_timeout": 10000, "methods": {"delete": {"retry_limit": 3}}}
            )
        """
        # config.py imports this module
        from .config import resolve_config

        return resolve_config(data)


@dataclass
class PendingCall:
    """A managed verb call awaiting its transport response or a resend"""

    method: str
    """HTTP verb name"""

    args: tuple[Any, ...]
    """Positional arguments, forwarded verbatim"""

    kwargs: dict[str, Any]
    """Keyword arguments, forwarded verbatim"""

    future: "asyncio.Future[Any]"
    """Result handed to the caller; settled exactly once"""

    retry_count: int = 0
    """Number of times this call has been re-queued"""


@dataclass(frozen=True)
class Unreachable:
    """Failure raised before any HTTP response was received"""

    error: BaseException

    retryable: bool = field(default=True, init=False)


@dataclass(frozen=True)
class HttpError:
    """Failure carrying an HTTP status from the server"""

    status: Any
    """Status as int when it converts, else the raw value"""

    error: BaseException

    retryable: bool = field(default=False, init=False)


TransportFailure = Union[Unreachable, HttpError]


# Event types
EventType = Literal[
    "call:start",
    "call:success",
    "call:queued",
    "call:fail",
    "queue:drain",
    "transport:dispose",
]


@dataclass
class RetryTransportEvent:
    """Event emitted by a RetryTransport"""

    type: EventType
    """Event type"""

    method: Optional[str] = None
    """HTTP verb of the call, if the event concerns one call"""

    retry_count: int = 0
    """Retry count of the call at emission time"""

    data: dict[str, Any] = field(default_factory=dict)
    """Event-specific data"""


RetryTransportEventListener = Callable[[RetryTransportEvent], None]
