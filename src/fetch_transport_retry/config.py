"""
Configuration utilities for fetch_transport_retry
"""
import logging
from typing import Any, Mapping, Optional, Union

from .types import (
    HTTP_VERBS,
    HttpError,
    InvalidArgumentError,
    MethodPolicy,
    RetryTransportConfig,
    TransportFailure,
    Unreachable,
)

logger = logging.getLogger(__name__)


# Default configuration: no verb is managed, resends are immediate
DEFAULT_RETRY_TRANSPORT_CONFIG = RetryTransportConfig(retry_timeout_ms=0, methods={})


def _coerce_int(value: Any, name: str) -> int:
    if value is None:
        return 0
    if isinstance(value, bool):
        raise InvalidArgumentError(f"{name} must be an integer, got bool")
    try:
        return int(value)
    except (TypeError, ValueError) as error:
        raise InvalidArgumentError(
            f"{name} must be an integer, got {type(value).__name__}"
        ) from error


def resolve_retry_timeout(value: Any) -> int:
    """
    Resolve the resend delay.

    Args:
        value: Configured delay in milliseconds, possibly missing

    Returns:
        The delay, or 0 when unset or non-positive
    """
    timeout = _coerce_int(value, "retry_timeout_ms")
    return timeout if timeout > 0 else 0


def resolve_method_policy(verb: str, value: Union[MethodPolicy, Mapping[str, Any], int, None]) -> MethodPolicy:
    """
    Normalise a single verb policy.

    Accepts a MethodPolicy, a mapping with ``retry_limit``/``retryLimit``,
    or a bare integer limit.
    """
    if isinstance(value, MethodPolicy):
        limit = value.retry_limit
    elif isinstance(value, Mapping):
        limit = value.get("retry_limit", value.get("retryLimit"))
    else:
        limit = value

    return MethodPolicy(retry_limit=_coerce_int(limit, f"methods[{verb!r}].retry_limit"))


def resolve_methods(methods: Optional[Mapping[str, Any]]) -> dict[str, MethodPolicy]:
    """
    Normalise the per-verb policy mapping.

    Verb names are lower-cased. Entries for verbs a RetryTransport does not
    expose are dropped with a warning.
    """
    if not methods:
        return {}

    resolved: dict[str, MethodPolicy] = {}
    for name, policy in methods.items():
        verb = str(name).lower()
        if verb not in HTTP_VERBS:
            logger.warning(f"resolve_methods: Ignoring policy for unsupported verb {name!r}")
            continue
        resolved[verb] = resolve_method_policy(verb, policy)
    return resolved


def resolve_config(
    config: Union[RetryTransportConfig, Mapping[str, Any], None] = None,
) -> RetryTransportConfig:
    """
    Merge configuration with defaults.

    Args:
        config: A RetryTransportConfig, an options mapping, or None

    Returns:
        Complete configuration with normalised timeout and policies
    """
    if config is None:
        return RetryTransportConfig(
            retry_timeout_ms=DEFAULT_RETRY_TRANSPORT_CONFIG.retry_timeout_ms,
            methods=dict(DEFAULT_RETRY_TRANSPORT_CONFIG.methods),
        )

    if isinstance(config, RetryTransportConfig):
        timeout = config.retry_timeout_ms
        methods = config.methods
    elif isinstance(config, Mapping):
        timeout = config.get(
            "retry_timeout_ms", config.get("retry_timeout", config.get("retryTimeout"))
        )
        methods = config.get("methods")
    else:
        raise InvalidArgumentError(
            f"config must be a RetryTransportConfig or a mapping, got {type(config).__name__}"
        )

    return RetryTransportConfig(
        retry_timeout_ms=resolve_retry_timeout(timeout),
        methods=resolve_methods(methods),
    )


def get_retry_limit(method: str, config: RetryTransportConfig) -> int:
    """Return the retry limit for a verb, 0 when it has no policy."""
    policy = config.methods.get(method)
    return policy.retry_limit if policy else 0


def is_managed_method(method: str, config: RetryTransportConfig) -> bool:
    """
    Check whether calls for a verb go through the retry queue.

    Args:
        method: The HTTP verb
        config: Retry transport configuration

    Returns:
        True when the verb has a policy with a positive retry limit
    """
    return get_retry_limit(method, config) > 0


def _status_of(source: Any) -> Any:
    for attr in ("status", "status_code"):
        status = getattr(source, attr, None)
        if not status:
            continue
        try:
            return int(status)
        except (TypeError, ValueError):
            return status
    return None


def get_failure_status(error: BaseException) -> Any:
    """
    Extract an HTTP status from a failure.

    Looks at ``status``/``status_code`` on the error itself, then on its
    ``response`` (as carried by ``httpx.HTTPStatusError``). Any truthy value
    counts as a status; it is converted to int when possible. A missing,
    zero or empty value counts as no status.
    """
    status = _status_of(error)
    if status is not None:
        return status

    response = getattr(error, "response", None)
    if response is not None:
        return _status_of(response)
    return None


def classify_failure(error: BaseException) -> TransportFailure:
    """
    Classify a failed transport call.

    Returns:
        HttpError when the server responded with a status, Unreachable otherwise
    """
    status = get_failure_status(error)
    if status is None:
        return Unreachable(error)
    return HttpError(status, error)
