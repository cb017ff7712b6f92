"""PyVeloce - sync product model UI definitions with a local source tree."""

from .api import VeloceClient
from .codec import decode, encode
from .exceptions import (
    UnrecognizedDefinitionError,
    VeloceAPIError,
    VeloceAuthenticationError,
    VeloceBuildError,
    VeloceConfigError,
    VeloceDecodeError,
    VeloceError,
    VeloceInvalidResponseError,
    VeloceNetworkError,
    VeloceNotFoundError,
    VeloceParseError,
    VelocePermissionError,
    VeloceRateLimitError,
)
from .models import ProductModel

__all__ = [
    "VeloceClient",
    "ProductModel",
    "decode",
    "encode",
    "UnrecognizedDefinitionError",
    "VeloceAPIError",
    "VeloceAuthenticationError",
    "VeloceBuildError",
    "VeloceConfigError",
    "VeloceDecodeError",
    "VeloceError",
    "VeloceInvalidResponseError",
    "VeloceNetworkError",
    "VeloceNotFoundError",
    "VeloceParseError",
    "VelocePermissionError",
    "VeloceRateLimitError",
]
