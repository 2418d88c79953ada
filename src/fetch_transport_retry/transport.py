"""
Retry transport wrapper for verb-oriented transports
"""
import asyncio
import functools
import inspect
import logging
from collections import deque
from typing import Any, Awaitable, Callable, Mapping, Optional, Union

from .config import (
    classify_failure,
    get_retry_limit,
    is_managed_method,
    resolve_config,
)
from .types import (
    InvalidArgumentError,
    PendingCall,
    RetryTransportConfig,
    RetryTransportEvent,
    RetryTransportEventListener,
    VerbTransport,
)

logger = logging.getLogger(__name__)


class RetryTransport:
    """
    Retry transport wrapper.

    Wraps a verb transport and resends calls that failed before reaching
    the server. Only verbs with a positive ``retry_limit`` are managed;
    every other call is forwarded to the wrapped transport untouched.

    Failed calls are queued and resent together when a single timer of
    ``retry_timeout_ms`` fires, so calls failing close together share one
    resend batch.

    Disposing the transport abandons queued and in-flight managed calls:
    their futures are never settled.

    Example:
        transport = RetryTransport(
            inner,
            {"retry_timeout": 10000, "methods": {"delete": {"retry_limit": 3}}},
        )
        response = await transport.delete("/orders/123")
    """

    def __init__(
        self,
        transport: VerbTransport,
        config: Union[RetryTransportConfig, Mapping[str, Any], None] = None,
    ) -> None:
        """
        Create a new RetryTransport.

        Args:
            transport: The wrapped transport to delegate calls to
            config: Retry timeout and per-verb policies; when omitted no verb is retried

        Raises:
            InvalidArgumentError: If transport is missing
        """
        if transport is None:
            raise InvalidArgumentError("Missing required parameter: transport in RetryTransport")

        self._transport = transport
        self._config = resolve_config(config)
        self._failed_calls: deque[PendingCall] = deque()
        self._retry_timer: Optional[asyncio.TimerHandle] = None
        self._in_flight: set[asyncio.Future[Any]] = set()
        self._listeners: list[RetryTransportEventListener] = []
        self._disposed = False

        limits = {verb: policy.retry_limit for verb, policy in self._config.methods.items()}
        logger.debug(
            f"RetryTransport.__init__: retry_timeout_ms={self._config.retry_timeout_ms}, methods={limits}"
        )

    def get(self, *args: Any, **kwargs: Any) -> Awaitable[Any]:
        """GET request."""
        return self._call("get", args, kwargs)

    def post(self, *args: Any, **kwargs: Any) -> Awaitable[Any]:
        """POST request."""
        return self._call("post", args, kwargs)

    def put(self, *args: Any, **kwargs: Any) -> Awaitable[Any]:
        """PUT request."""
        return self._call("put", args, kwargs)

    def delete(self, *args: Any, **kwargs: Any) -> Awaitable[Any]:
        """DELETE request."""
        return self._call("delete", args, kwargs)

    def patch(self, *args: Any, **kwargs: Any) -> Awaitable[Any]:
        """PATCH request."""
        return self._call("patch", args, kwargs)

    def head(self, *args: Any, **kwargs: Any) -> Awaitable[Any]:
        """HEAD request."""
        return self._call("head", args, kwargs)

    def options(self, *args: Any, **kwargs: Any) -> Awaitable[Any]:
        """OPTIONS request."""
        return self._call("options", args, kwargs)

    def _call(self, method: str, args: tuple[Any, ...], kwargs: dict[str, Any]) -> Awaitable[Any]:
        """Route a verb call through the retry queue or straight to the wrapped transport."""
        # After dispose there is no queue to retry from; the wrapped transport decides
        if self._disposed or not is_managed_method(method, self._config):
            return getattr(self._transport, method)(*args, **kwargs)

        loop = asyncio.get_running_loop()
        call = PendingCall(
            method=method,
            args=args,
            kwargs=kwargs,
            future=loop.create_future(),
        )
        self._send_transport_call(call)
        return call.future

    def _send_transport_call(self, call: PendingCall) -> None:
        """Invoke the wrapped transport for a managed call."""
        if call.future.cancelled():
            logger.debug(f"RetryTransport._send_transport_call: {call.method} cancelled by caller, dropping")
            return

        logger.debug(
            f"RetryTransport._send_transport_call: method={call.method}, retry_count={call.retry_count}"
        )
        self._emit(RetryTransportEvent(type="call:start", method=call.method, retry_count=call.retry_count))

        try:
            pending = asyncio.ensure_future(
                getattr(self._transport, call.method)(*call.args, **call.kwargs)
            )
        except Exception as error:
            self._handle_failure(call, error)
            return

        self._in_flight.add(pending)
        pending.add_done_callback(functools.partial(self._on_transport_done, call))

    def _on_transport_done(self, call: PendingCall, pending: "asyncio.Future[Any]") -> None:
        self._in_flight.discard(pending)

        if pending.cancelled():
            if not self._disposed:
                call.future.cancel()
            return

        error = pending.exception()
        if self._disposed:
            logger.debug(f"RetryTransport._on_transport_done: {call.method} finished after dispose, dropping")
            return
        if call.future.cancelled():
            logger.debug(f"RetryTransport._on_transport_done: {call.method} cancelled by caller, dropping")
            return

        if error is None:
            call.future.set_result(pending.result())
            self._emit(RetryTransportEvent(type="call:success", method=call.method, retry_count=call.retry_count))
            return

        self._handle_failure(call, error)

    def _handle_failure(self, call: PendingCall, error: BaseException) -> None:
        """Queue a failed call for resend, or reject it when it cannot be retried."""
        failure = classify_failure(error)
        retry_limit = get_retry_limit(call.method, self._config)
        will_retry = failure.retryable and call.retry_count < retry_limit

        logger.debug(
            f"RetryTransport._handle_failure: method={call.method}, failure={type(failure).__name__}, "
            f"retry_count={call.retry_count}, retry_limit={retry_limit}, will_retry={will_retry}"
        )

        if will_retry:
            self._add_failed_call(call)
            return

        call.future.set_exception(error)
        self._emit(RetryTransportEvent(
            type="call:fail",
            method=call.method,
            retry_count=call.retry_count,
            data={"error": str(error), "status": getattr(failure, "status", None)},
        ))

    def _add_failed_call(self, call: PendingCall) -> None:
        call.retry_count += 1
        self._failed_calls.append(call)
        self._emit(RetryTransportEvent(type="call:queued", method=call.method, retry_count=call.retry_count))

        if self._retry_timer is None:
            delay = self._config.retry_timeout_ms / 1000
            self._retry_timer = call.future.get_loop().call_later(delay, self._retry_failed_calls)
            logger.debug(f"RetryTransport._add_failed_call: Retry timer started, delay_seconds={delay}")

    def _retry_failed_calls(self) -> None:
        """Resend every call queued before the timer fired, in FIFO order."""
        self._retry_timer = None
        batch_size = len(self._failed_calls)

        logger.debug(f"RetryTransport._retry_failed_calls: Resending {batch_size} call(s)")
        self._emit(RetryTransportEvent(type="queue:drain", data={"size": batch_size}))

        # Calls that fail synchronously re-enter the queue for the next timer
        while batch_size and self._failed_calls:
            self._send_transport_call(self._failed_calls.popleft())
            batch_size -= 1

    def _emit(self, event: RetryTransportEvent) -> None:
        """Emit an event to all listeners."""
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as error:
                logger.warning(f"RetryTransport._emit: Listener failed on {event.type}: {error}")

    def on(self, listener: RetryTransportEventListener) -> Callable[[], None]:
        """
        Add an event listener.

        Args:
            listener: Event listener function

        Returns:
            Function to remove the listener
        """
        self._listeners.append(listener)
        return lambda: self.off(listener)

    def off(self, listener: RetryTransportEventListener) -> None:
        """Remove an event listener."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    def dispose(self) -> Any:
        """
        Dispose the wrapped transport, the failed calls queue and the retry timer.

        Queued and in-flight managed calls are abandoned without settling
        their futures. Calling dispose again does nothing.
        Calls made afterwards are forwarded to the wrapped transport unmanaged.

        The return value must be awaited when it is awaitable (for example
        the httpx client's ``aclose()`` coroutine); ``aclose()`` does that.

        Returns:
            Whatever the wrapped transport's dispose returns (may be awaitable)
        """
        if self._disposed:
            logger.debug("RetryTransport.dispose: Already disposed")
            return None

        self._disposed = True
        abandoned = len(self._failed_calls) + len(self._in_flight)
        self._failed_calls.clear()
        if self._retry_timer is not None:
            self._retry_timer.cancel()
            self._retry_timer = None

        logger.info(f"RetryTransport.dispose: Disposing transport, abandoned_calls={abandoned}")
        self._emit(RetryTransportEvent(type="transport:dispose", data={"abandoned": abandoned}))

        return self._transport.dispose()

    async def aclose(self) -> None:
        """Dispose the transport, awaiting the wrapped transport's disposal."""
        result = self.dispose()
        if inspect.isawaitable(result):
            await result

    async def __aenter__(self) -> "RetryTransport":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    @property
    def config(self) -> RetryTransportConfig:
        """Get the resolved configuration."""
        return self._config

    @property
    def transport(self) -> VerbTransport:
        """Get the wrapped transport."""
        return self._transport

    @property
    def pending_count(self) -> int:
        """Number of calls waiting for the next resend."""
        return len(self._failed_calls)

    @property
    def timer_active(self) -> bool:
        """Whether a resend timer is pending."""
        return self._retry_timer is not None

    @property
    def disposed(self) -> bool:
        """Whether dispose has been called."""
        return self._disposed
