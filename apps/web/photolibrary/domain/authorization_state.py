"""Per-call authorization states of an authorized downstream request."""

from enum import Enum


class AuthorizationState(str, Enum):
    NO_CLIENT = "NO_CLIENT"
    AUTHORIZED = "AUTHORIZED"
    UPSTREAM_CALLED = "UPSTREAM_CALLED"
    UPSTREAM_FAILED = "UPSTREAM_FAILED"


_TERMINAL_STATES: set[AuthorizationState] = {
    AuthorizationState.NO_CLIENT,
    AuthorizationState.UPSTREAM_CALLED,
    AuthorizationState.UPSTREAM_FAILED,
}

_ALLOWED_TRANSITIONS: dict[AuthorizationState, set[AuthorizationState]] = {
    AuthorizationState.NO_CLIENT: set(),
    AuthorizationState.AUTHORIZED: {AuthorizationState.UPSTREAM_CALLED, AuthorizationState.UPSTREAM_FAILED},
    AuthorizationState.UPSTREAM_CALLED: set(),
    AuthorizationState.UPSTREAM_FAILED: set(),
}


class InvalidAuthorizationTransition(RuntimeError):
    """Raised when a call tries to leave a terminal state or skip a step."""

    def __init__(self, current: AuthorizationState, attempted: AuthorizationState) -> None:
        self.current = current
        self.attempted = attempted
        super().__init__(f"Invalid authorization transition {current.value} -> {attempted.value}")


def is_terminal(state: AuthorizationState) -> bool:
    return state in _TERMINAL_STATES


def ensure_transition(old_state: AuthorizationState, new_state: AuthorizationState) -> AuthorizationState:
    """Validate a transition and return the new state."""
    if new_state not in _ALLOWED_TRANSITIONS.get(old_state, set()):
        raise InvalidAuthorizationTransition(old_state, new_state)
    return new_state
