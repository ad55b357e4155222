"""
Unit tests for the page session state machine.
"""

import pytest
from bs4 import BeautifulSoup

from textgrab.services import SessionState, apply


@pytest.fixture
def nodes():
    soup = BeautifulSoup("<div><p>one</p><p>two</p></div>", "html.parser")
    return soup.find_all("p")


class TestSessionState:
    """Test event transitions."""

    def test_initial_state(self):
        state = SessionState()

        assert not state.inspect_mode
        assert not state.menu_visible
        assert state.highlighted is None
        assert state.selected is None

    def test_toggle_menu(self):
        state = apply(SessionState(), "toggle-menu")
        assert state.menu_visible

        state = apply(state, "toggle-menu")
        assert not state.menu_visible

    def test_enter_inspect_hides_menu(self):
        state = apply(SessionState(menu_visible=True), "enter-inspect")

        assert state.inspect_mode
        assert not state.menu_visible

    def test_hover_only_in_inspect_mode(self, nodes):
        idle = apply(SessionState(), "hover", nodes[0])
        assert idle.highlighted is None

        inspecting = apply(apply(SessionState(), "enter-inspect"), "hover", nodes[0])
        assert inspecting.highlighted is nodes[0]

    def test_select_leaves_inspect_mode(self, nodes):
        state = apply(SessionState(), "enter-inspect")
        state = apply(state, "hover", nodes[1])
        state = apply(state, "select", nodes[1])

        assert not state.inspect_mode
        assert state.highlighted is None
        assert state.selected is nodes[1]

    def test_select_ignored_outside_inspect_mode(self, nodes):
        state = apply(SessionState(), "select", nodes[0])
        assert state.selected is None

    def test_escape_exits_inspect_mode(self, nodes):
        state = apply(apply(SessionState(), "enter-inspect"), "hover", nodes[0])

        state = apply(state, "escape")

        assert not state.inspect_mode
        assert state.highlighted is None

    def test_transitions_do_not_mutate(self):
        before = SessionState()
        after = apply(before, "toggle-menu")

        assert before.menu_visible is False
        assert after is not before

    def test_unknown_event(self):
        with pytest.raises(ValueError):
            apply(SessionState(), "double-click")
