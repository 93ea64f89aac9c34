"""mdbridge exception hierarchy."""


class MdBridgeError(Exception):
    """Base exception for all mdbridge errors."""


class ConfigurationError(MdBridgeError, ValueError):
    """Raised when settings are invalid or a delegate cannot be built from them."""


class ServiceNotFoundError(MdBridgeError, LookupError):
    """Raised when a service, component or function is not registered."""
