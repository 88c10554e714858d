"""Exception hierarchy shared by the gateway client and manager."""

from __future__ import annotations


class BkApiError(Exception):
    """Base class of every error raised by this package.

    An optional context message is put in front of the class's default
    message, as in ``"namespace: sub: not found"``.
    """

    default_message = "bkapi error"

    def __init__(self, message: str = "") -> None:
        self.context = message
        text = f"{message}: {self.default_message}" if message else self.default_message
        super().__init__(text)


class ConfigInvalidError(BkApiError):
    """The client configuration cannot be used."""

    default_message = "config invalid"


class TypeNotMatchError(BkApiError):
    """An option was applied to an object of the wrong type."""

    default_message = "type not match"


class BkApiRequestError(BkApiError):
    """The gateway reported an error for a request."""

    default_message = "bkapi request error"


class NotFoundError(BkApiError):
    """A requested item does not exist."""

    default_message = "not found"


class ApigatewayRequestError(BkApiError):
    """The gateway management API answered with a non-zero code."""

    default_message = "apigateway request error"


class PublicKeyNotFoundError(BkApiError):
    """The gateway returned no public key."""

    default_message = "public key not found"


class PublicKeyTypeNotSupportedError(BkApiError):
    """The gateway returned a public key that is not a string."""

    default_message = "public key type not supported"


class KidInvalidError(BkApiError):
    """A JWT header carries no usable ``kid``."""

    default_message = "kid is invalid"