"""Custom exceptions for PyVeloce."""


class VeloceError(Exception):
    """Base exception for all PyVeloce errors."""


class VeloceAPIError(VeloceError):
    """Base exception for remote API errors."""


class VeloceAuthenticationError(VeloceAPIError):
    """Raised when the access token is invalid or expired."""


class VelocePermissionError(VeloceAPIError):
    """Raised when access to a resource is forbidden."""


class VeloceNotFoundError(VeloceAPIError):
    """Raised when a remote resource does not exist."""


class VeloceRateLimitError(VeloceAPIError):
    """Raised when the remote API rate limit is exceeded."""


class VeloceNetworkError(VeloceAPIError):
    """Raised on transport-level failures (DNS, connection, timeout)."""


class VeloceInvalidResponseError(VeloceAPIError):
    """Raised when the server returns an unexpected response body."""


class VeloceConfigError(VeloceError):
    """Raised when the instance URL or access token is missing."""


class VeloceDecodeError(VeloceError):
    """Raised when wire content cannot be decoded or decompressed."""


class VeloceParseError(VeloceError):
    """Raised when decoded content is not valid definitions JSON."""


class UnrecognizedDefinitionError(VeloceError):
    """Raised when a UI definition is neither legacy nor modern."""


class VeloceBuildError(VeloceError):
    """Raised when a local source tree cannot be packed."""
