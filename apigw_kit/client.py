"""Gateway API client that creates configured operations."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

import requests

from apigw_kit.errors import BkApiError, ConfigInvalidError, TypeNotMatchError
from apigw_kit.operation import Operation, Request, RequestHook
from apigw_kit.response_detail import BkApiResponseDetail

DEFAULT_USER_AGENT = "apigw-kit"

OperationFactory = Callable[[str, "BkApiClient", Request], Any]


@dataclass(frozen=True)
class OperationConfig:
    """Name, HTTP method and path of one gateway resource."""

    name: str = ""
    method: str = "GET"
    path: str = ""

    def provide_config(self) -> OperationConfig:
        return self


class BkApiClient:
    """Base client for one gateway.

    ``config`` is any object with a ``url`` attribute and, optionally,
    ``authorization_headers`` (a mapping) and ``logger`` (a
    :class:`logging.Logger` or compatible object).
    """

    def __init__(
        self,
        name: str,
        config: Any,
        *,
        operation_factory: OperationFactory = Operation,
        session: requests.Session | None = None,
    ) -> None:
        base_url = getattr(config, "url", "") or ""
        if not base_url:
            raise ConfigInvalidError("base url is empty")

        self.name = name
        self.base_url = base_url
        self.headers: dict[str, str] = dict(getattr(config, "authorization_headers", None) or {})
        self.logger: logging.Logger | None = getattr(config, "logger", None)
        self.session = session
        self.hooks: list[RequestHook] = []
        self.operation_options: list[Any] = []
        self._operation_factory = operation_factory

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name} {self.base_url}>"

    def apply(self, *options: Any) -> None:
        """Apply client options in order, stopping at the first failure."""
        for option in options:
            try:
                option.apply_to_client(self)
            except Exception as exc:
                raise BkApiError(
                    f"failed to apply option {option!r} to client {self.name}"
                ) from exc

    def add_operation_options(self, *options: Any) -> None:
        """Register options applied to every operation created afterwards."""
        self.operation_options.extend(options)

    def _run_hooks(self, request: Request) -> None:
        for hook in list(self.hooks):
            hook(request)

    def _log_response(self, operation: Any, response: requests.Response) -> None:
        logger = self.logger
        if logger is None:
            return

        fields = BkApiResponseDetail.from_headers(response.headers).as_dict()
        fields["operation"] = operation
        fields["status"] = f"{response.status_code} {response.reason or ''}".rstrip()
        fields["status_code"] = response.status_code

        category = response.status_code // 100
        if category == 4:
            logger.warning("request error caused by client", extra=fields)
        elif category == 5:
            logger.error("request error caused by server", extra=fields)
        else:
            logger.debug("request success", extra=fields)

    def _new_request(self, config: Any) -> Request:
        operation_path = config.path or ""

        def _set_user_agent(request: Request) -> None:
            request.headers["User-Agent"] = DEFAULT_USER_AGENT

        def _join_path(request: Request) -> None:
            base = request.path.removesuffix("/")
            request.path = f"{base}/{operation_path.removeprefix('/')}"

        request = Request(
            config.method or "GET",
            self.base_url,
            headers=self.headers,
            session=self.session,
        )
        request.use(self._run_hooks)
        request.use(_set_user_agent)
        request.use(_join_path)
        return request

    @staticmethod
    def _operation_name(config: Any) -> str:
        if config.name:
            return config.name
        return f"({config.method} {config.path})"

    def new_operation(self, config: Any, *options: Any) -> Any:
        """Create an operation for ``config`` and apply the common and given options."""
        if hasattr(config, "provide_config"):
            config = config.provide_config()

        request = self._new_request(config)
        operation = self._operation_factory(self._operation_name(config), self, request)
        request.use_response(lambda response: self._log_response(operation, response))

        for group in (list(self.operation_options), list(options)):
            if group:
                operation.apply(*group)

        return operation


class BkApiClientOption:
    """An option that configures a :class:`BkApiClient` through a function."""

    def __init__(self, fn: Callable[[BkApiClient], Any]) -> None:
        self._fn = fn

    def apply_to_client(self, client: Any) -> Any:
        if not isinstance(client, BkApiClient):
            raise TypeNotMatchError(
                f"expected type {BkApiClient.__name__}, got {type(client).__name__}"
            )
        return self._fn(client)


def _headers_of(mapping: Mapping[str, str] | None) -> dict[str, str]:
    return dict(mapping or {})