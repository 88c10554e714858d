"""Options that install request hooks on a client or an operation."""

from __future__ import annotations

from typing import Any

from apigw_kit.client import BkApiClient, BkApiClientOption
from apigw_kit.operation import Operation, OperationOption, RequestHook


class PluginOption:
    """Installs request hooks on a client or on a single operation."""

    def __init__(self, *plugins: RequestHook) -> None:
        self.plugins: tuple[RequestHook, ...] = tuple(plugins)
        self._client_option = BkApiClientOption(self._use_in_client)
        self._operation_option = OperationOption(self._use_in_operation)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({len(self.plugins)} plugins)"

    def _use_in_client(self, client: BkApiClient) -> None:
        client.hooks.extend(self.plugins)

    def _use_in_operation(self, operation: Operation) -> None:
        for plugin in self.plugins:
            operation.raw_request.use(plugin)

    def apply_to_client(self, client: Any) -> Any:
        """Add the hooks to every request the client sends."""
        return self._client_option.apply_to_client(client)

    def apply_to_operation(self, operation: Any) -> Any:
        """Add the hooks to the operation's request only."""
        return self._operation_option.apply_to_operation(operation)