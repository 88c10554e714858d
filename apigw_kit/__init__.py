"""Client toolkit for API gateways: operations, options, definitions, token parsing and public keys."""

__version__ = "0.1.0"