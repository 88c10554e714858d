"""Error details that the gateway reports in response headers."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from apigw_kit.errors import BkApiRequestError

_REQUEST_ID_HEADER = "x-bkapi-request-id"
_ERROR_CODE_HEADER = "x-bkapi-error-code"
_ERROR_MESSAGE_HEADER = "x-bkapi-error-message"


class BkApiResponseDetail(BkApiRequestError):
    """Request id and error information of one gateway response."""

    def __init__(self, request_id: str = "", error_code: str = "", error_message: str = "") -> None:
        super().__init__()
        self.request_id = request_id
        self.error_code = error_code
        self.error_message = error_message

    def __str__(self) -> str:
        return (
            f"requestId: {self.request_id}, errorCode: {self.error_code}, "
            f"errorMessage: {self.error_message}"
        )

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(request_id={self.request_id!r}, "
            f"error_code={self.error_code!r}, error_message={self.error_message!r})"
        )

    def get_error(self) -> BkApiResponseDetail | None:
        """Return this detail as an error when an error code is present."""
        return self if self.error_code else None

    def as_dict(self) -> dict[str, Any]:
        """Return the non-empty details keyed for logging."""
        items = {
            "bkapi_request_id": self.request_id,
            "bkapi_error_code": self.error_code,
            "bkapi_error_message": self.error_message,
        }
        return {key: value for key, value in items.items() if value}

    @classmethod
    def from_headers(cls, headers: Mapping[str, Any]) -> BkApiResponseDetail:
        """Build a detail from response headers, matching names case-insensitively."""
        lowered: dict[str, str] = {}
        for key, value in headers.items():
            if isinstance(value, (list, tuple)):
                value = value[0] if value else ""
            lowered.setdefault(str(key).lower(), str(value))
        return cls(
            lowered.get(_REQUEST_ID_HEADER, ""),
            lowered.get(_ERROR_CODE_HEADER, ""),
            lowered.get(_ERROR_MESSAGE_HEADER, ""),
        )