"""
Factory functions for creating retry-enabled verb transports
"""
from typing import Any, Callable, Mapping, Optional, Union

from .adapters import HttpxVerbTransport
from .config import resolve_config
from .transport import RetryTransport
from .types import MethodPolicy, RetryTransportConfig, VerbTransport


def _build_config(
    retry_timeout_ms: int,
    methods: Optional[Mapping[str, Any]],
    config: Union[RetryTransportConfig, Mapping[str, Any], None],
) -> RetryTransportConfig:
    if config is not None:
        return resolve_config(config)
    return resolve_config({"retry_timeout_ms": retry_timeout_ms, "methods": methods})


def create_retry_transport(
    transport: VerbTransport,
    *,
    retry_timeout_ms: int = 0,
    methods: Optional[Mapping[str, Any]] = None,
    config: Union[RetryTransportConfig, Mapping[str, Any], None] = None,
) -> RetryTransport:
    """
    Wrap a verb transport with retry logic.

    Args:
        transport: The transport to wrap
        retry_timeout_ms: Delay before queued calls are resent. Default: 0
        methods: Per-verb policies, e.g. {"delete": {"retry_limit": 3}}
        config: Complete config (takes precedence over the other options)

    Returns:
        Retry-enabled transport

    Example:
        transport = create_retry_transport(
            inner,
            retry_timeout_ms=10000,
            methods={"delete": {"retry_limit": 3}},
        )
    """
    return RetryTransport(transport, _build_config(retry_timeout_ms, methods, config))


def create_retry_client(
    *,
    base_url: Optional[str] = None,
    timeout: float = 5.0,
    retry_timeout_ms: int = 0,
    methods: Optional[Mapping[str, Any]] = None,
    config: Union[RetryTransportConfig, Mapping[str, Any], None] = None,
    raise_for_status: bool = True,
    **client_kwargs: Any,
) -> RetryTransport:
    """
    Create a retry-enabled verb client backed by httpx.

    Args:
        base_url: Base URL for requests
        timeout: Request timeout in seconds. Default: 5.0
        retry_timeout_ms: Delay before queued calls are resent. Default: 0
        methods: Per-verb policies
        config: Complete config (takes precedence over retry_timeout_ms/methods)
        raise_for_status: Raise on 4xx/5xx responses. Default: True
        **client_kwargs: Additional arguments for httpx.AsyncClient

    Returns:
        RetryTransport over an owned httpx.AsyncClient; close it with ``aclose()``

    Example:
        client = create_retry_client(
            base_url="https://api.example.com",
            retry_timeout_ms=1000,
            methods={"get": {"retry_limit": 3}},
        )
        response = await client.get("/data")
        await client.aclose()
    """
    inner = HttpxVerbTransport(
        raise_for_status=raise_for_status,
        base_url=base_url or "",
        timeout=timeout,
        **client_kwargs,
    )
    return RetryTransport(inner, _build_config(retry_timeout_ms, methods, config))


def create_verb_retry_wrapper(
    *,
    retry_timeout_ms: int = 0,
    methods: Optional[Mapping[str, Any]] = None,
    config: Union[RetryTransportConfig, Mapping[str, Any], None] = None,
) -> Callable[[VerbTransport], RetryTransport]:
    """
    Create a wrapper function applying the same retry config to any transport.

    Example:
        with_delete_retry = create_verb_retry_wrapper(methods={"delete": {"retry_limit": 3}})
        orders = with_delete_retry(orders_transport)
        accounts = with_delete_retry(accounts_transport)
    """
    resolved = _build_config(retry_timeout_ms, methods, config)

    def wrapper(inner: VerbTransport) -> RetryTransport:
        return RetryTransport(inner, resolved)

    return wrapper


# Preset retry configurations
RETRY_PRESETS = {
    "default": RetryTransportConfig(
        retry_timeout_ms=1000,
        methods={"get": MethodPolicy(retry_limit=3)},
    ),
    "idempotent": RetryTransportConfig(
        retry_timeout_ms=1000,
        methods={
            "get": MethodPolicy(retry_limit=3),
            "head": MethodPolicy(retry_limit=3),
            "options": MethodPolicy(retry_limit=3),
            "put": MethodPolicy(retry_limit=3),
            "delete": MethodPolicy(retry_limit=3),
        },
    ),
    "none": RetryTransportConfig(retry_timeout_ms=0, methods={}),
}
