"""Network Error Handler for the GraphQL engine API client.

Classifies transport-level failures (no HTTP response was received) into
specific exceptions carrying user guidance for the CI log. Nothing here
retries: every transport failure is fatal for the run.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, cast

import httpx

logger = logging.getLogger(__name__)


@dataclass
class UserGuidance:
    """User guidance information for network errors."""

    error_type: str
    troubleshooting_steps: List[str]
    additional_notes: List[str] = field(default_factory=list)

    def format_for_console(self) -> str:
        """Format guidance for rich console output."""
        content = []
        content.append(f"[bold red]Error Type:[/bold red] {self.error_type}")
        content.append("")
        content.append("[bold yellow]Troubleshooting Steps:[/bold yellow]")

        for i, step in enumerate(self.troubleshooting_steps, 1):
            content.append(f"{i}. {step}")

        if self.additional_notes:
            content.append("")
            content.append("[bold blue]Additional Notes:[/bold blue]")
            for note in self.additional_notes:
                content.append(f"• {note}")

        return "\n".join(content)


class TransportError(Exception):
    """Base class for failures where the server sent no HTTP response."""

    def __init__(self, message: str, user_guidance: Optional[str] = None):
        super().__init__(message)
        self.user_guidance = user_guidance or ""


class NetworkConnectionError(TransportError):
    """Exception raised for connection-related network failures."""

    pass


class NetworkTimeoutError(TransportError):
    """Exception raised for timeout-related network failures."""

    pass


class DNSResolutionError(TransportError):
    """Exception raised for DNS resolution failures."""

    pass


class SSLCertificateError(TransportError):
    """Exception raised for SSL certificate verification failures."""

    pass


class UserGuidanceProvider:
    """Provides user guidance for different network error scenarios."""

    def __init__(self):
        self._guidance_mapping = {
            NetworkConnectionError: self._get_connection_error_guidance,
            DNSResolutionError: self._get_dns_resolution_guidance,
            SSLCertificateError: self._get_ssl_certificate_guidance,
            NetworkTimeoutError: self._get_timeout_guidance,
        }

    def get_guidance(self, error: Exception) -> UserGuidance:
        """Get user guidance for a specific error."""
        guidance_func = self._guidance_mapping.get(
            type(error), self._get_generic_guidance
        )
        return cast(UserGuidance, guidance_func(error))

    def _get_connection_error_guidance(
        self, error: NetworkConnectionError
    ) -> UserGuidance:
        return UserGuidance(
            error_type="Network Connection Error",
            troubleshooting_steps=[
                "Check that the GraphQL engine is running and reachable from the runner",
                "Verify the host input points at the engine, not the console",
                "Check firewall or VPN rules between the runner and the engine",
            ],
            additional_notes=[
                "This error typically indicates the server is not reachable",
            ],
        )

    def _get_dns_resolution_guidance(self, error: DNSResolutionError) -> UserGuidance:
        return UserGuidance(
            error_type="DNS Resolution Error",
            troubleshooting_steps=[
                "Verify the hostname in the host input is spelled correctly",
                "Try using an IP address instead of hostname",
                "Check the runner's DNS configuration",
            ],
            additional_notes=[
                "DNS resolution issues are often temporary",
            ],
        )

    def _get_ssl_certificate_guidance(self, error: SSLCertificateError) -> UserGuidance:
        return UserGuidance(
            error_type="SSL Certificate Error",
            troubleshooting_steps=[
                "Check if the server certificate is valid and not expired",
                "Verify the server hostname matches the certificate",
                "Check if the runner needs an updated certificate store",
            ],
            additional_notes=[
                "Do not disable certificate verification without proper security review",
            ],
        )

    def _get_timeout_guidance(self, error: NetworkTimeoutError) -> UserGuidance:
        return UserGuidance(
            error_type="Network Timeout Error",
            troubleshooting_steps=[
                "Check if the GraphQL engine is under heavy load",
                "Re-run the job - this may be a temporary issue",
                "Increase the timeout with --timeout if the problem persists",
            ],
        )

    def _get_generic_guidance(self, error: Exception) -> UserGuidance:
        return UserGuidance(
            error_type="Unknown Network Error",
            troubleshooting_steps=[
                "Check the runner's network connection",
                "Verify the GraphQL engine is accessible",
                "Re-run the job",
            ],
        )


class NetworkErrorHandler:
    """Classifies httpx transport exceptions."""

    def __init__(self):
        self.guidance_provider = UserGuidanceProvider()
        self._dns_error_patterns = [
            r"name.*resolution.*failed",
            r"name.*or.*service.*not.*known",
            r"nodename.*nor.*servname.*provided",
            r"temporary.*failure.*in.*name.*resolution",
        ]
        self._connection_error_patterns = [
            r"connection.*refused",
            r"connection.*reset",
            r"network.*is.*unreachable",
            r"no.*route.*to.*host",
        ]
        self._ssl_error_patterns = [
            r"ssl.*certificate.*verification.*failed",
            r"certificate.*verify.*failed",
            r"ssl.*handshake.*failed",
            r"bad.*certificate",
        ]

    def classify_network_error(self, error: Exception) -> TransportError:
        """Map an httpx transport exception to a specific TransportError.

        Args:
            error: The original httpx exception

        Returns:
            TransportError subclass with user guidance attached
        """
        error_message = str(error).lower()

        if isinstance(error, httpx.TimeoutException):
            classified = self._timeout_error(error_message)
        elif isinstance(error, httpx.ConnectError):
            classified = self._connect_error(error, error_message)
        elif isinstance(error, httpx.TransportError):
            classified = NetworkConnectionError(f"Network error: {error}")
        else:
            classified = NetworkConnectionError(f"Unknown network error: {error}")

        guidance = self.guidance_provider.get_guidance(classified)
        classified.user_guidance = guidance.format_for_console()
        logger.debug(f"Classified {type(error).__name__} as {type(classified).__name__}")
        return classified

    def _connect_error(
        self, error: httpx.ConnectError, error_message: str
    ) -> TransportError:
        if any(re.search(p, error_message) for p in self._dns_error_patterns):
            return DNSResolutionError(
                "Cannot resolve server address. Check the host input."
            )
        if any(re.search(p, error_message) for p in self._ssl_error_patterns):
            return SSLCertificateError(
                "SSL certificate verification failed. Server may be using invalid certificate."
            )
        if any(re.search(p, error_message) for p in self._connection_error_patterns):
            return NetworkConnectionError(
                "Cannot connect to server. Check if server is running and accessible."
            )
        return NetworkConnectionError(f"Connection failed: {error}")

    def _timeout_error(self, error_message: str) -> TransportError:
        if "connect" in error_message:
            return NetworkTimeoutError(
                "Connection timed out. Check your network connection or try again later."
            )
        return NetworkTimeoutError(
            "Request timed out. Check your network connection or try again later."
        )
