"""
Retry-with-delay decorator for verb-oriented HTTP transports.
"""
from .types import (
    HTTP_VERBS,
    HttpVerb,
    HttpError,
    InvalidArgumentError,
    MethodPolicy,
    PendingCall,
    RetryTransportConfig,
    RetryTransportEvent,
    RetryTransportEventListener,
    TransportFailure,
    Unreachable,
    VerbTransport,
)
from .config import (
    DEFAULT_RETRY_TRANSPORT_CONFIG,
    classify_failure,
    get_failure_status,
    get_retry_limit,
    is_managed_method,
    resolve_config,
)
from .transport import RetryTransport
from .adapters import HttpxVerbTransport
from .factory import (
    create_retry_transport,
    create_retry_client,
    create_verb_retry_wrapper,
    RETRY_PRESETS,
)


__all__ = [
    # Types
    "HTTP_VERBS",
    "HttpVerb",
    "HttpError",
    "InvalidArgumentError",
    "MethodPolicy",
    "PendingCall",
    "RetryTransportConfig",
    "RetryTransportEvent",
    "RetryTransportEventListener",
    "TransportFailure",
    "Unreachable",
    "VerbTransport",
    # Config
    "DEFAULT_RETRY_TRANSPORT_CONFIG",
    "classify_failure",
    "get_failure_status",
    "get_retry_limit",
    "is_managed_method",
    "resolve_config",
    # Transport
    "RetryTransport",
    "HttpxVerbTransport",
    # Factory functions
    "create_retry_transport",
    "create_retry_client",
    "create_verb_retry_wrapper",
    "RETRY_PRESETS",
]

__version__ = "1.0.0"
