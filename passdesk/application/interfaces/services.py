"""Service interfaces (ports) for identity, project selection, and delivery.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
"""

from typing import Protocol


class IIdentityProvider(Protocol):
    """Protocol for resolving the signed-in user."""

    def current_user_id(self) -> str:
        """Return the signed-in user's id; raise NotAuthenticatedException if none."""


class IProjectSelection(Protocol):
    """Protocol for resolving the project the admin is working in."""

    def current_project_id(self) -> str:
        """Return the selected project id; raise NoProjectSelectedException if none."""


class IDeliverySink(Protocol):
    """Protocol for handing a finished export file to the host environment."""

    def deliver(self, content: str, filename: str, mime_type: str) -> None:
        """Persist or hand over one export file. Failures raise DeliveryException."""
