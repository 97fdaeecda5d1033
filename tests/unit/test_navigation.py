"""Unit tests for screen navigation."""

import pytest

from pulse.services.navigation import ALLOWED_TRANSITIONS, NavigationError, Navigator, View


class TestNavigator:

    def test_starts_at_login(self):
        assert Navigator().current == View.LOGIN

    def test_full_survey_flow(self):
        navigator = Navigator()
        assert navigator.login() == View.DASHBOARD
        assert navigator.go(View.SURVEYS) == View.SURVEYS
        assert navigator.start_survey() == View.TAKING_SURVEY
        assert navigator.complete_survey() == View.DASHBOARD

    def test_cancel_returns_to_survey_list(self):
        navigator = Navigator(View.SURVEYS)
        navigator.start_survey()
        assert navigator.cancel_survey() == View.SURVEYS

    def test_cannot_skip_login(self):
        navigator = Navigator()
        with pytest.raises(NavigationError):
            navigator.go(View.SURVEYS)
        assert navigator.current == View.LOGIN

    def test_cannot_take_survey_from_dashboard(self):
        navigator = Navigator(View.DASHBOARD)
        assert not navigator.can_go(View.TAKING_SURVEY)
        with pytest.raises(NavigationError):
            navigator.start_survey()

    def test_complete_requires_taking_survey(self):
        navigator = Navigator(View.SURVEYS)
        with pytest.raises(NavigationError):
            navigator.complete_survey()
        with pytest.raises(NavigationError):
            navigator.cancel_survey()

    @pytest.mark.parametrize("view", list(View))
    def test_logout_from_anywhere(self, view):
        navigator = Navigator(view)
        assert navigator.logout() == View.LOGIN

    def test_every_view_has_transitions(self):
        assert set(ALLOWED_TRANSITIONS) == set(View)
