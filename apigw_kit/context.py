"""Template context used when rendering gateway definitions."""

from __future__ import annotations

import os
from typing import Any

_APP_CODE_ATTR = "app_code"
_APP_CREDENTIAL_ATTR = "app_secret"
_EMPTY = ""


class DefinitionContext:
    """Builds the variables available to a definition template.

    ``config`` is any object with ``app_code`` and ``app_secret`` attributes.
    """

    def __init__(self, api_name: str, config: Any) -> None:
        self.api_name = api_name
        self.config = config

    def settings(self) -> dict[str, Any]:
        app_code = getattr(self.config, _APP_CODE_ATTR, _EMPTY)
        app_credential = getattr(self.config, _APP_CREDENTIAL_ATTR, _EMPTY)
        return {
            "BK_APIGW_NAME": self.api_name,
            "BK_APP_CODE": app_code,
            "BK_APP_SECRET": app_credential,
        }

    def environ(self) -> dict[str, str]:
        return dict(os.environ)

    def context(self, data: Any) -> dict[str, Any]:
        """Return the ``settings``, ``environ`` and ``data`` template variables."""
        return {
            "settings": self.settings(),
            "environ": self.environ(),
            "data": data,
        }