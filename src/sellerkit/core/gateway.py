"""HTTP gateway that executes one API call and normalizes its result.

Every call goes through the same pipeline::

    reset call state -> merge headers -> emit RequestEvent -> httpx call
        -> rate-limit extraction -> JSON decode -> emit ResponseEvent/ErrorEvent

HTTP error statuses whose body is JSON are returned like any other result so
callers can branch on API-specific error codes.  Only failures without a
usable response raise :class:`~sellerkit.core.errors.TransportError`.
"""

from __future__ import annotations

import contextvars
import json
import logging
import secrets
import time
from collections.abc import Callable, Mapping
from datetime import date, datetime
from enum import Enum
from typing import Any, Literal, NoReturn, Self

import httpx

from sellerkit.core.config import GatewayConfig
from sellerkit.core.errors import TransportError
from sellerkit.core.events import EventBus, Observer
from sellerkit.core.masking import HeaderMasker
from sellerkit.core.rate_limit import RateLimitTracker
from sellerkit.models.enums import EventPhase, HttpMethod
from sellerkit.models.events import ErrorEvent, RequestEvent, ResponseEvent
from sellerkit.models.http import RateLimitInfo, RequestDescriptor, ResponseOutcome
from sellerkit.telemetry.base import Attr, SpanKind, TelemetryProvider
from sellerkit.telemetry.noop import NoopTelemetryProvider

logger = logging.getLogger("sellerkit.gateway")

DURATION_METRIC = "sellerkit.http.duration"


def merge_headers(*sources: Mapping[str, str] | None) -> dict[str, str]:
    """Merge header mappings; later sources win, keys compared case-insensitively."""
    merged: dict[str, str] = {}
    for source in sources:
        if not source:
            continue
        for name, value in source.items():
            for existing in [k for k in merged if k.lower() == name.lower()]:
                del merged[existing]
            merged[name] = value
    return merged


def _json_default(obj: Any) -> Any:
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, datetime | date):
        return obj.isoformat()
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def _query_params(params: Any) -> list[tuple[str, Any]]:
    """Flatten GET params: booleans become 1/0, ``None`` is dropped, lists repeat."""
    if not params:
        return []
    if not isinstance(params, Mapping):
        raise TypeError(f"GET params must be a mapping, got {type(params).__name__}")
    pairs: list[tuple[str, Any]] = []
    for key, value in params.items():
        values = value if isinstance(value, list | tuple) else [value]
        for item in values:
            if item is None:
                continue
            if isinstance(item, bool):
                item = int(item)
            elif isinstance(item, Enum):
                item = item.value
            elif isinstance(item, datetime | date):
                item = item.isoformat()
            pairs.append((str(key), item))
    return pairs


def _multipart_fields(params: Any) -> list[tuple[str, Any]]:
    """Build httpx ``files`` entries so the body is always multipart.

    Accepts a mapping of field name to value, or a list of
    ``{"name", "contents", "filename"?, "content_type"?}`` parts.  Plain values
    become form fields (``None`` filename), bytes and file objects become
    file parts.
    """
    if not params:
        return []
    if isinstance(params, Mapping):
        parts = [{"name": name, "contents": value} for name, value in params.items()]
    else:
        parts = list(params)

    fields: list[tuple[str, Any]] = []
    for part in parts:
        name = str(part["name"])
        contents = part["contents"]
        filename = part.get("filename")
        if isinstance(contents, tuple):
            fields.append((name, contents))
        elif filename is not None or isinstance(contents, bytes) or hasattr(contents, "read"):
            entry: tuple[Any, ...] = (filename or name, contents)
            if part.get("content_type"):
                entry = (*entry, part["content_type"])
            fields.append((name, entry))
        else:
            fields.append((name, (None, _form_value(contents))))
    return fields


def _form_value(value: Any) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, Mapping | list):
        return json.dumps(value, default=_json_default)
    return "" if value is None else str(value)


def _decode_json(raw: str) -> tuple[bool, Any]:
    """Return ``(True, value)`` when *raw* is JSON, else ``(False, raw)``."""
    try:
        return True, json.loads(raw)
    except ValueError:
        return False, raw


def _exception_class(exc: BaseException) -> str:
    cls = type(exc)
    return f"{cls.__module__}.{cls.__qualname__}"


class HttpGateway:
    """Stateful transport shared by all endpoint wrappers.

    Telemetry of the most recent call is kept in a context variable, so
    accessors such as :attr:`response_code` reflect the last call made from
    the *current* thread or task only.  Concurrent callers never observe each
    other's results; prefer the :class:`ResponseOutcome` returned by
    :meth:`send` when a single call's data is needed.

    Observers must be registered before the gateway is shared between
    threads; registration itself is thread-safe.
    """

    def __init__(
        self,
        config: GatewayConfig,
        *,
        client: httpx.Client | None = None,
        telemetry: TelemetryProvider | None = None,
        events: EventBus | None = None,
        masker: HeaderMasker | None = None,
        rate_limits: RateLimitTracker | None = None,
    ) -> None:
        self._config = config
        self._owns_client = client is None
        self._client = client or httpx.Client(
            timeout=httpx.Timeout(config.timeout),
            proxy=config.proxy_url,
            verify=config.verify,
            follow_redirects=True,
        )
        self._telemetry = telemetry or NoopTelemetryProvider()
        self.events = events or EventBus()
        self._masker = masker or HeaderMasker()
        self._rate_limits = rate_limits or RateLimitTracker()
        self._last: contextvars.ContextVar[ResponseOutcome] = contextvars.ContextVar(
            f"sellerkit_last_outcome_{id(self):x}", default=ResponseOutcome.empty()
        )

    # -------------------------------------------------------------------------
    # Observers and middleware
    # -------------------------------------------------------------------------

    def on_request(self, cb: Observer) -> Self:
        self.events.subscribe(EventPhase.REQUEST, cb)
        return self

    def on_response(self, cb: Observer) -> Self:
        self.events.subscribe(EventPhase.RESPONSE, cb)
        return self

    def on_error(self, cb: Observer) -> Self:
        self.events.subscribe(EventPhase.ERROR, cb)
        return self

    def add_middleware(
        self,
        hook: Callable[[Any], None],
        phase: Literal["request", "response"] = "request",
    ) -> None:
        """Register an httpx event hook on the underlying client.

        Request hooks receive the outgoing ``httpx.Request`` and may mutate
        it; response hooks receive the ``httpx.Response``.
        """
        if phase not in ("request", "response"):
            raise ValueError(f"phase must be 'request' or 'response', got {phase!r}")
        hooks = self._client.event_hooks
        hooks[phase] = [*hooks.get(phase, []), hook]
        self._client.event_hooks = hooks

    # -------------------------------------------------------------------------
    # Calls
    # -------------------------------------------------------------------------

    def request(
        self,
        method: str | HttpMethod,
        path: str,
        params: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        """Execute a call and return the decoded JSON body (or raw text).

        Raises:
            InvalidMethodError: *method* is not supported.
            TransportError: No response was received, or an error response
                carried a body that is not JSON.
        """
        return self.send(method, path, params, headers).parsed_body

    def send(
        self,
        method: str | HttpMethod,
        path: str,
        params: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> ResponseOutcome:
        """Execute a call and return its immutable :class:`ResponseOutcome`."""
        self._last.set(ResponseOutcome.empty())
        http_method = HttpMethod.parse(method)
        started = time.monotonic()

        request = RequestDescriptor(
            correlation_id=secrets.token_hex(8),
            method=http_method,
            url=f"{self._config.base_url}{path}",
            headers=self._build_headers(http_method, headers),
            params=params if params is not None else {},
        )
        self._last.set(ResponseOutcome.empty(request))
        payload = self._build_payload(request)

        self.events.emit(
            EventPhase.REQUEST,
            RequestEvent(
                correlation_id=request.correlation_id,
                method=http_method,
                url=request.url,
                headers=self._masker.mask(request.headers),
                params=request.params,
            ),
        )

        with self._telemetry.span(
            SpanKind.HTTP_REQUEST,
            f"{http_method} {path}",
            attributes={
                Attr.HTTP_METHOD: str(http_method),
                Attr.HTTP_URL: request.url,
                Attr.CORRELATION_ID: request.correlation_id,
            },
        ) as span_id:
            outcome = self._execute(request, payload, started)
            self._telemetry.set_attribute(span_id, Attr.HTTP_STATUS_CODE, outcome.status_code)
            self._telemetry.set_attribute(
                span_id, Attr.RATE_LIMIT_REMAINING, outcome.rate_limit.remaining
            )
        return outcome

    def _execute(
        self, request: RequestDescriptor, payload: dict[str, Any], started: float
    ) -> ResponseOutcome:
        try:
            response = self._client.request(
                request.method.verb, request.url, headers=request.headers, **payload
            )
            if response.is_error:
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            return self._handle_error_response(request, exc, started)
        except httpx.HTTPError as exc:
            self._handle_no_response(request, exc, started)

        outcome, _ = self._build_outcome(request, response, started)
        self._finish(outcome)
        self.events.emit(
            EventPhase.RESPONSE,
            ResponseEvent(
                correlation_id=request.correlation_id,
                method=request.method,
                url=request.url,
                status=response.status_code,
                headers=self._masker.mask(outcome.headers),
                raw=outcome.raw_body,
                duration_ms=outcome.duration_ms,
            ),
        )
        logger.debug(
            "%s %s -> %d (%dms)",
            request.method,
            request.url,
            response.status_code,
            outcome.duration_ms,
            extra={"correlation_id": request.correlation_id},
        )
        return outcome

    @staticmethod
    def _build_payload(request: RequestDescriptor) -> dict[str, Any]:
        """httpx keyword arguments carrying *request.params*.

        Raises:
            TypeError: The params cannot be sent with this method.
        """
        method = request.method
        if method is HttpMethod.GET:
            return {"params": _query_params(request.params)}
        if method is HttpMethod.MULTIPART:
            return {"files": _multipart_fields(request.params)}
        return {"content": json.dumps(request.params, default=_json_default)}

    def _handle_error_response(
        self,
        request: RequestDescriptor,
        exc: httpx.HTTPStatusError,
        started: float,
    ) -> ResponseOutcome:
        outcome, is_json = self._build_outcome(request, exc.response, started)
        self._finish(outcome)
        self.events.emit(
            EventPhase.ERROR,
            ErrorEvent(
                correlation_id=request.correlation_id,
                method=request.method,
                url=request.url,
                status=outcome.status_code,
                exception_class=_exception_class(exc),
                message=str(exc),
                headers=self._masker.mask(outcome.headers),
                raw=outcome.raw_body,
                duration_ms=outcome.duration_ms,
            ),
        )
        if not is_json:
            logger.warning(
                "%s %s -> %d with non-JSON body",
                request.method,
                request.url,
                outcome.status_code,
                extra={"correlation_id": request.correlation_id},
            )
            raise TransportError(
                f"HTTP {outcome.status_code} {outcome.reason_phrase or ''}".rstrip()
                + " with non-JSON body",
                outcome=outcome,
            ) from exc

        logger.debug(
            "%s %s -> %d (%dms)",
            request.method,
            request.url,
            outcome.status_code,
            outcome.duration_ms,
            extra={"correlation_id": request.correlation_id},
        )
        return outcome

    def _handle_no_response(
        self,
        request: RequestDescriptor,
        exc: httpx.HTTPError,
        started: float,
    ) -> NoReturn:
        outcome = ResponseOutcome(request=request, duration_ms=self._elapsed_ms(started))
        self._finish(outcome)
        self.events.emit(
            EventPhase.ERROR,
            ErrorEvent(
                correlation_id=request.correlation_id,
                method=request.method,
                url=request.url,
                status=None,
                exception_class=_exception_class(exc),
                message=str(exc),
                duration_ms=outcome.duration_ms,
            ),
        )
        logger.warning(
            "%s %s failed without response: %s",
            request.method,
            request.url,
            exc,
            extra={"correlation_id": request.correlation_id},
        )
        raise TransportError(str(exc) or type(exc).__name__, outcome=outcome) from exc

    def _build_outcome(
        self,
        request: RequestDescriptor,
        response: httpx.Response,
        started: float,
    ) -> tuple[ResponseOutcome, bool]:
        headers = dict(response.headers.items())
        raw = response.text
        is_json, body = _decode_json(raw)
        outcome = ResponseOutcome(
            status_code=response.status_code,
            reason_phrase=response.reason_phrase,
            headers=headers,
            raw_body=raw,
            parsed_body=body,
            rate_limit=self._rate_limits.extract(headers),
            request=request,
            duration_ms=self._elapsed_ms(started),
        )
        return outcome, is_json

    def _finish(self, outcome: ResponseOutcome) -> None:
        self._last.set(outcome)
        self._telemetry.record_metric(
            DURATION_METRIC,
            float(outcome.duration_ms),
            unit="ms",
            attributes={
                Attr.HTTP_METHOD: str(outcome.request.method) if outcome.request else "",
                Attr.HTTP_STATUS_CODE: outcome.status_code,
            },
        )

    def _build_headers(
        self, method: HttpMethod, extra: Mapping[str, str] | None
    ) -> dict[str, str]:
        api_key = self._config.api_key.get_secret_value()
        if method is HttpMethod.MULTIPART:
            defaults = {"Authorization": api_key}
        else:
            defaults = {
                "Accept": "application/json",
                "Content-Type": "application/json",
                "Authorization": api_key,
            }
        return merge_headers(defaults, self._config.headers, extra)

    @staticmethod
    def _elapsed_ms(started: float) -> int:
        return int((time.monotonic() - started) * 1000)

    # -------------------------------------------------------------------------
    # Last-call accessors (scoped to the current thread/task)
    # -------------------------------------------------------------------------

    @property
    def last_outcome(self) -> ResponseOutcome:
        return self._last.get()

    @property
    def response_code(self) -> int | None:
        return self._last.get().status_code

    @property
    def response_phrase(self) -> str | None:
        return self._last.get().reason_phrase

    @property
    def response_headers(self) -> dict[str, str]:
        return self._last.get().headers

    @property
    def raw_response(self) -> str | None:
        return self._last.get().raw_body

    @property
    def response(self) -> Any:
        return self._last.get().parsed_body

    @property
    def rate_limit(self) -> RateLimitInfo:
        return self._last.get().rate_limit

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
