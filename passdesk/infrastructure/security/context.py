"""Per-request caller context: signed-in user and selected project."""

from passdesk.domain.exceptions import NoProjectSelectedException, NotAuthenticatedException


class RequestIdentity:
    """Signed-in user resolved from the request's ID token (None when absent or invalid)."""

    def __init__(self, user_id: str | None) -> None:
        self._user_id = user_id

    def current_user_id(self) -> str:
        if not self._user_id:
            raise NotAuthenticatedException()
        return self._user_id


class HeaderProjectSelection:
    """Project chosen in the dashboard, sent with every request as a header."""

    def __init__(self, project_id: str | None) -> None:
        self._project_id = (project_id or "").strip() or None

    def current_project_id(self) -> str:
        if not self._project_id:
            raise NoProjectSelectedException()
        return self._project_id
