"""Session state shared by all documents in one process.

Holds values that outlive a single document: whether the global
auto-enable mode was left on, and the last limit a user picked.
"""

from typing import Optional, Any, Dict


class SessionManager:
    """Process-wide key/value store.

    A singleton, so every workspace and command created in the same
    process reads the same state.
    """

    _instance: Optional['SessionManager'] = None

    def __new__(cls) -> 'SessionManager':
        """Return the one shared instance."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._state = {}
        return cls._instance

    def get(self, key: str, default: Any = None) -> Any:
        """Look up a session value.

        Args:
            key: One of the SessionKeys constants
            default: Returned when the key was never set

        Returns:
            The stored value or `default`
        """
        return self._state.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Store a session value.

        Args:
            key: One of the SessionKeys constants
            value: The value to remember for the rest of the process
        """
        self._state[key] = value

    def clear(self) -> None:
        """Clear all session state."""
        self._state.clear()

    def clear_key(self, key: str) -> None:
        self._state.pop(key, None)

    @property
    def state(self) -> Dict[str, Any]:
        """Copy of the current state."""
        return self._state.copy()


class SessionKeys:
    """Constants for session state keys."""

    # Read back by GlobalOverflowMode.restore
    GLOBAL_MODE = "global_mode_enabled"
    # Read back by the set-limit command when called without a limit
    LAST_COLUMN_LIMIT = "last_column_limit"


def get_session() -> SessionManager:
    """Get the session manager instance."""
    return SessionManager()
