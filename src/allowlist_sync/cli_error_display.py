"""
CLI Error Display for allowlist synchronization failures.

Renders fatal errors as a rich panel with the engine's error code, any
network guidance, and emits a GitHub Actions error annotation when running
inside a workflow.
"""

import logging
import os
import traceback
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .api_clients.base_client import APIClientError, HasuraAPIError
from .api_clients.network_error_handler import TransportError
from .config import ConfigurationError
from .services.document_collector import DocumentReadError

logger = logging.getLogger(__name__)


def escape_workflow_data(message: str) -> str:
    """Escape a message for use in a ``::error::`` workflow command."""
    return message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


class CLIErrorDisplay:
    """Shows fatal errors to the operator."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console(stderr=True)

    def _title_for(self, error: Exception) -> str:
        if isinstance(error, ConfigurationError):
            return "Configuration Error"
        if isinstance(error, DocumentReadError):
            return "Query Document Error"
        if isinstance(error, TransportError):
            return "Network Error"
        if isinstance(error, APIClientError):
            return "GraphQL Engine Error"
        return "Unexpected Error"

    def display_error(self, error: Exception, show_technical_details: bool = False):
        """Display a fatal error.

        Args:
            error: The exception that aborted the run
            show_technical_details: Also print the traceback
        """
        error_text = Text()
        error_text.append("❌ ", style="red")
        error_text.append(str(error) or type(error).__name__, style="red bold")

        self.console.print()
        self.console.print(
            Panel(
                error_text,
                title=self._title_for(error),
                title_align="left",
                border_style="red",
                width=80,
            )
        )

        if isinstance(error, HasuraAPIError):
            self._display_api_details(error)

        guidance = getattr(error, "user_guidance", "")
        if guidance:
            self.console.print()
            self.console.print(guidance)

        if show_technical_details:
            self.console.print()
            self.console.print("Technical Details:", style="dim")
            self.console.print(
                "".join(
                    traceback.format_exception(type(error), error, error.__traceback__)
                ),
                style="dim red",
                markup=False,
            )

        self.emit_workflow_annotation(str(error))

    def _display_api_details(self, error: HasuraAPIError):
        details_table = Table(show_header=False, box=None, pad_edge=False)
        details_table.add_column("Field", style="dim", width=12)
        details_table.add_column("Value", style="white")

        details_table.add_row("Status", str(error.status_code))
        if error.code:
            details_table.add_row("Code", error.code)
        if error.error:
            details_table.add_row("Error", error.error)

        self.console.print(details_table)

    def emit_workflow_annotation(self, message: str) -> None:
        """Emit ``::error::`` so the failure shows up on the workflow run."""
        if os.environ.get("GITHUB_ACTIONS") != "true":
            return
        # Plain print: workflow commands must not be wrapped or styled
        print(f"::error::{escape_workflow_data(message)}", flush=True)
