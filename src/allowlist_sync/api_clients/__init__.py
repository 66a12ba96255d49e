"""API Client Abstractions for the GraphQL engine metadata API.

All HTTP functionality is contained within dedicated API client classes.
"""

from .base_client import (
    HasuraMetadataAPIClient,
    APIClientError,
    HasuraAPIError,
)
from .allowlist_client import AllowlistAPIClient
from .network_error_handler import (
    TransportError,
    NetworkConnectionError,
    NetworkTimeoutError,
    DNSResolutionError,
    SSLCertificateError,
)

__all__ = [
    # Base client
    "HasuraMetadataAPIClient",
    "APIClientError",
    "HasuraAPIError",
    # Allowlist client
    "AllowlistAPIClient",
    # Transport errors
    "TransportError",
    "NetworkConnectionError",
    "NetworkTimeoutError",
    "DNSResolutionError",
    "SSLCertificateError",
]
