class ProxyError(Exception):
    """Base exception for credential-proxy failures."""


class MissingInputError(ProxyError):
    """Raised when a proxy endpoint is called without its required input."""


class ProviderTransportError(ProxyError):
    """Raised when the provider could not be reached at all."""
