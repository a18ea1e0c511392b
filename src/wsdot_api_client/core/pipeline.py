"""Single-call request orchestration: URL, transport, parse, convert."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping

from ..config import WsdotClientConfig
from .errors import (
    OutputValidationError,
    WsdotApiError,
    WsdotClientClosedError,
    WsdotConfigError,
    classify_error,
)
from .models import EndpointDescriptor, FetchMode
from .response_parsing import convert_wire_dates, parse_json_text
from .script_transport import ScriptHost
from .strategy import RuntimeEnvironment, create_transport
from .transport_shared import TransportStrategy
from .urls import build_url, inject_auth, redact_url
from .validation import ValidationFailure

logger = logging.getLogger("wsdot_api_client")


class RequestPipeline:
    """Turns ``(descriptor, params, mode)`` into a parsed response.

    Each call runs strictly in order: optional input validation, URL
    resolution with credential injection, transport fetch, JSON parse, then
    the mode-specific post-processing. Any failure is raised exactly once as
    a :class:`WsdotApiError`. No retries happen here.
    """

    def __init__(
        self,
        config: WsdotClientConfig,
        *,
        transport: TransportStrategy | None = None,
        environment: RuntimeEnvironment | None = None,
        script_host: ScriptHost | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._config = config
        self._transport = transport or create_transport(
            config,
            environment=environment,
            script_host=script_host,
        )
        self._clock = clock or time.monotonic
        self._closed = False

    @property
    def transport(self) -> TransportStrategy:
        return self._transport

    def build_url(self, template: str, params: Mapping[str, object] | None = None) -> str:
        return build_url(template, params, base_url=self._config.get_base_url())

    def inject_auth(self, url: str) -> str:
        return inject_auth(url, self._credential())

    def resolve_url(
        self,
        descriptor: EndpointDescriptor,
        params: Mapping[str, object] | None = None,
    ) -> str:
        return self.inject_auth(self.build_url(descriptor.url_template, params))

    async def execute(
        self,
        descriptor: EndpointDescriptor,
        params: Mapping[str, object] | None = None,
        mode: FetchMode = FetchMode.NATIVE,
    ) -> object:
        if self._closed:
            raise WsdotClientClosedError("request pipeline is already closed")
        credential = self._credential()
        endpoint = descriptor.endpoint_id
        url: str | None = None
        started_at = self._clock()

        try:
            resolved_params = self._validate_input(descriptor, params, mode)
            url = inject_auth(
                self.build_url(descriptor.url_template, resolved_params),
                credential,
            )
            logger.debug(
                "request start endpoint=%s transport=%s url=%s",
                endpoint,
                getattr(self._transport, "name", "custom"),
                redact_url(url),
            )
            text = await self._transport.fetch(url)
            payload = parse_json_text(text)
            result = self._post_process(descriptor, payload, mode)
        except WsdotApiError as exc:
            self._log_failure(exc)
            raise
        except Exception as exc:
            error = classify_error(exc, endpoint=endpoint, url=url)
            self._log_failure(error)
            raise error from exc

        logger.info(
            "request success endpoint=%s duration_ms=%d bytes=%s",
            endpoint,
            (self._clock() - started_at) * 1000,
            len(text),
        )
        return result

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._transport.close()

    def _credential(self) -> str:
        try:
            return self._config.get_credential()
        except ValueError as exc:
            raise WsdotConfigError(str(exc)) from exc

    @staticmethod
    def _validate_input(
        descriptor: EndpointDescriptor,
        params: Mapping[str, object] | None,
        mode: FetchMode,
    ) -> Mapping[str, object]:
        values = dict(params or {})
        if mode is not FetchMode.VALIDATED or descriptor.input_schema is None:
            return values
        validated = descriptor.input_schema.validate(values)
        if not isinstance(validated, Mapping):
            raise ValidationFailure("input schema must produce a mapping")
        return validated

    @staticmethod
    def _post_process(
        descriptor: EndpointDescriptor,
        payload: object,
        mode: FetchMode,
    ) -> object:
        if mode is FetchMode.RAW:
            return payload
        if mode is FetchMode.VALIDATED and descriptor.output_schema is not None:
            try:
                return descriptor.output_schema.validate(payload)
            except ValidationFailure as exc:
                raise OutputValidationError(str(exc)) from exc
        return convert_wire_dates(payload)

    @staticmethod
    def _log_failure(error: WsdotApiError) -> None:
        logger.error(
            "request failed endpoint=%s kind=%s http_status=%s url=%s",
            error.endpoint,
            error.kind.value,
            error.http_status,
            error.url,
        )


__all__ = [
    "RequestPipeline",
]
