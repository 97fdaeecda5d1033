"""Screen navigation state for the client application.

Screens form a closed set with explicit allowed transitions:
login -> dashboard <-> surveys -> taking_survey -> dashboard (completed)
or surveys (cancelled). Logging out returns to login from anywhere.
"""

from enum import Enum

from pulse.logging_config import get_logger

logger = get_logger(__name__)


class View(str, Enum):
    LOGIN = "login"
    DASHBOARD = "dashboard"
    SURVEYS = "surveys"
    TAKING_SURVEY = "taking_survey"


class NavigationError(Exception):
    """Raised when a screen change is not an allowed transition."""
    pass


ALLOWED_TRANSITIONS: dict[View, frozenset[View]] = {
    View.LOGIN: frozenset({View.DASHBOARD}),
    View.DASHBOARD: frozenset({View.SURVEYS, View.LOGIN}),
    View.SURVEYS: frozenset({View.DASHBOARD, View.TAKING_SURVEY, View.LOGIN}),
    View.TAKING_SURVEY: frozenset({View.DASHBOARD, View.SURVEYS, View.LOGIN}),
}


class Navigator:
    """Tracks the current screen and enforces allowed transitions."""

    def __init__(self, initial: View = View.LOGIN):
        self.current = initial

    def can_go(self, target: View) -> bool:
        return target in ALLOWED_TRANSITIONS[self.current]

    def go(self, target: View) -> View:
        """Move to ``target``.

        Raises:
            NavigationError: If the transition is not allowed
        """
        if not self.can_go(target):
            logger.warning(f"Rejected navigation {self.current.value} -> {target.value}")
            raise NavigationError(
                f"Cannot navigate from {self.current.value} to {target.value}"
            )
        logger.debug(f"Navigated {self.current.value} -> {target.value}")
        self.current = target
        return self.current

    def login(self) -> View:
        return self.go(View.DASHBOARD)

    def logout(self) -> View:
        self.current = View.LOGIN
        return self.current

    def start_survey(self) -> View:
        return self.go(View.TAKING_SURVEY)

    def complete_survey(self) -> View:
        self._require_taking_survey("complete")
        return self.go(View.DASHBOARD)

    def cancel_survey(self) -> View:
        self._require_taking_survey("cancel")
        return self.go(View.SURVEYS)

    def _require_taking_survey(self, action: str) -> None:
        if self.current != View.TAKING_SURVEY:
            raise NavigationError(f"Cannot {action} a survey from {self.current.value}")
