"""
Interaction state of one page session as an immutable value.

Event handlers take the current state and return the next one, so the state
machine can be exercised without a live document.
"""

from dataclasses import dataclass, replace
from typing import Callable, Dict, Optional

from bs4.element import Tag


@dataclass(frozen=True)
class SessionState:
    inspect_mode: bool = False
    menu_visible: bool = False
    highlighted: Optional[Tag] = None
    selected: Optional[Tag] = None


def toggle_menu(state: SessionState, node: Optional[Tag] = None) -> SessionState:
    return replace(state, menu_visible=not state.menu_visible)


def hide_menu(state: SessionState, node: Optional[Tag] = None) -> SessionState:
    return replace(state, menu_visible=False)


def enter_inspect(state: SessionState, node: Optional[Tag] = None) -> SessionState:
    return replace(state, inspect_mode=True, menu_visible=False, highlighted=None)


def exit_inspect(state: SessionState, node: Optional[Tag] = None) -> SessionState:
    return replace(state, inspect_mode=False, highlighted=None)


def hover(state: SessionState, node: Optional[Tag] = None) -> SessionState:
    # Highlighting only happens while picking an element.
    if not state.inspect_mode:
        return state
    return replace(state, highlighted=node)


def select(state: SessionState, node: Optional[Tag] = None) -> SessionState:
    """Pick ``node`` and leave inspect mode. Ignored outside inspect mode."""
    if not state.inspect_mode or node is None:
        return state
    return replace(state, inspect_mode=False, highlighted=None, selected=node)


EVENT_HANDLERS: Dict[str, Callable[[SessionState, Optional[Tag]], SessionState]] = {
    "toggle-menu": toggle_menu,
    "hide-menu": hide_menu,
    "enter-inspect": enter_inspect,
    "exit-inspect": exit_inspect,
    "escape": exit_inspect,
    "hover": hover,
    "select": select,
}


def apply(state: SessionState, event: str, node: Optional[Tag] = None) -> SessionState:
    """
    Apply a named UI event.

    Raises:
        ValueError: for unknown event names
    """
    handler = EVENT_HANDLERS.get(event)
    if handler is None:
        raise ValueError(f"Unknown session event: {event}")
    return handler(state, node)
