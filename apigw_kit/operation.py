"""Single API operations and the HTTP request they send."""

from __future__ import annotations

import copy
from collections.abc import Callable, Mapping
from typing import Any
from urllib.parse import urlsplit, urlunsplit

import requests

from apigw_kit.errors import BkApiError, TypeNotMatchError
from apigw_kit.placeholder import replace_placeholder
from apigw_kit.response_detail import BkApiResponseDetail

RequestHook = Callable[["Request"], None]
ResponseHook = Callable[[requests.Response], None]


class Request:
    """A reusable HTTP request description with before-send and after-receive hooks.

    Request hooks run on a fresh copy of the request every time it is sent,
    so hooks that rewrite the URL do not accumulate across sends.
    """

    def __init__(
        self,
        method: str = "GET",
        url: str = "",
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
        body: Any = None,
        session: requests.Session | None = None,
        timeout: float | None = None,
    ) -> None:
        self.method = method
        self.url = url
        self.headers: dict[str, str] = dict(headers or {})
        self.params: dict[str, str] = dict(params or {})
        self.body = body
        self.content_length: int | None = None
        self.session = session
        self.timeout = timeout
        self._hooks: list[RequestHook] = []
        self._response_hooks: list[ResponseHook] = []

    @property
    def path(self) -> str:
        return urlsplit(self.url).path

    @path.setter
    def path(self, value: str) -> None:
        self.url = urlunsplit(urlsplit(self.url)._replace(path=value))

    @property
    def hooks(self) -> tuple[RequestHook, ...]:
        return tuple(self._hooks)

    @property
    def response_hooks(self) -> tuple[ResponseHook, ...]:
        return tuple(self._response_hooks)

    def use(self, hook: RequestHook) -> Request:
        """Register a hook that may modify the request before it is sent."""
        self._hooks.append(hook)
        return self

    def use_response(self, hook: ResponseHook) -> Request:
        """Register a hook that sees every received response."""
        self._response_hooks.append(hook)
        return self

    def set_headers(self, headers: Mapping[str, str]) -> Request:
        self.headers.update(headers)
        return self

    def set_query_params(self, params: Mapping[str, str]) -> Request:
        self.params.update(params)
        return self

    def _working_copy(self) -> Request:
        working = copy.copy(self)
        working.headers = dict(self.headers)
        working.params = dict(self.params)
        working._hooks = list(self._hooks)
        working._response_hooks = list(self._response_hooks)
        return working

    def send(self) -> requests.Response:
        """Run the request hooks, send the request and run the response hooks.

        Transport failures propagate as ``requests`` exceptions. A body given
        as a reader is consumed here.
        """
        working = self._working_copy()
        for hook in self._hooks:
            hook(working)

        body = working.body
        if hasattr(body, "read"):
            body = body.read()

        session = working.session or requests.Session()
        try:
            prepared = session.prepare_request(
                requests.Request(
                    working.method,
                    working.url,
                    headers=working.headers,
                    params=working.params or None,
                    data=body,
                )
            )
            if working.content_length is not None:
                prepared.headers["Content-Length"] = str(working.content_length)
            response = session.send(prepared, timeout=working.timeout)
        finally:
            if working.session is None:
                session.close()

        for hook in working._response_hooks:
            hook(response)
        return response


class Operation:
    """One named gateway API call that can be configured and then sent.

    Setters return the operation so calls can be chained. Body and result
    providers are duck-typed: ``provide_body(operation, data)`` and
    ``provide_result(response, result)``.
    """

    def __init__(self, name: str, client: Any, request: Request) -> None:
        self.name = name
        self.client = client
        self.error: BaseException | None = None
        self.body_data: Any = None
        self.body_provider: Any = None
        self.result: Any = None
        self.result_provider: Any = None
        self._request = request

    @property
    def client_name(self) -> str:
        return self.client.name

    @property
    def raw_request(self) -> Request:
        """The underlying request this operation sends."""
        return self._request

    def full_name(self) -> str:
        return f"{self.client_name}.api.{self.name}"

    def __str__(self) -> str:
        return f"{self.client_name} {self.name}"

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self}>"

    def apply(self, *options: Any) -> Operation:
        """Apply options; a failure is kept and raised by :meth:`request`."""
        for option in options:
            try:
                option.apply_to_operation(self)
            except Exception as exc:
                error = BkApiError(f"failed to apply option {option!r}")
                error.__cause__ = exc
                self.error = error
        return self

    def set_headers(self, headers: Mapping[str, str]) -> Operation:
        self._request.set_headers(headers)
        return self

    def set_query_params(self, params: Mapping[str, str]) -> Operation:
        self._request.set_query_params(params)
        return self

    def set_path_params(self, params: Mapping[str, str]) -> Operation:
        values = dict(params)

        def _replace(request: Request) -> None:
            request.path = replace_placeholder(request.path, values)

        self._request.use(_replace)
        return self

    def set_body_reader(self, body: Any) -> Operation:
        self._request.body = body
        return self

    def set_body(self, body: Any) -> Operation:
        self.body_data = body
        return self

    def set_body_provider(self, provider: Any) -> Operation:
        self.body_provider = provider
        return self

    def set_result(self, result: Any) -> Operation:
        self.result = result
        return self

    def set_result_provider(self, provider: Any) -> Operation:
        self.result_provider = provider
        return self

    def set_content_type(self, content_type: str) -> Operation:
        self._request.headers["Content-Type"] = content_type
        return self

    def set_content_length(self, length: int) -> Operation:
        self._request.content_length = length
        return self

    def _call_body_provider(self) -> None:
        if self.body_provider is None:
            return
        try:
            self.body_provider.provide_body(self, self.body_data)
        except Exception as exc:
            raise BkApiError(f"failed to set body for operation {self}") from exc

    def _call_result_provider(self, response: requests.Response) -> None:
        # Read the whole body so the connection is released.
        _ = response.content
        response.close()
        if self.result_provider is None:
            return
        try:
            self.result_provider.provide_result(response, self.result)
        except Exception as exc:
            raise BkApiError(f"failed to decode result for operation {self}") from exc

    @staticmethod
    def _check_bkapi_error(response: requests.Response) -> None:
        if 200 <= response.status_code < 300:
            return
        error = BkApiResponseDetail.from_headers(response.headers).get_error()
        if error is not None:
            raise error

    def request(self) -> requests.Response:
        """Send the operation and return the response.

        Raises the stored option error, a gateway error reported in the
        response headers, or a provider failure.
        """
        if self.error is not None:
            raise self.error
        self._call_body_provider()
        response = self._request.send()
        self._check_bkapi_error(response)
        self._call_result_provider(response)
        return response


class OperationOption:
    """An option that configures an :class:`Operation` through a function."""

    def __init__(self, fn: Callable[[Operation], Any]) -> None:
        self._fn = fn

    def apply_to_client(self, client: Any) -> Any:
        """Register this option so that it is applied to each new operation."""
        return client.add_operation_options(self)

    def apply_to_operation(self, operation: Any) -> Any:
        if not isinstance(operation, Operation):
            raise TypeNotMatchError(
                f"expected type {Operation.__name__}, got {type(operation).__name__}"
            )
        return self._fn(operation)