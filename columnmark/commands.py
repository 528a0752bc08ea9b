"""Command pattern implementation for user-facing mode commands."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional, TYPE_CHECKING

from .policy import validate_limit
from .session import SessionKeys, get_session

if TYPE_CHECKING:
    from .mode import GlobalOverflowMode, ModeController


@dataclass
class CommandContext:
    """What a command acts on: the current document's controller and the global mode."""
    controller: "Optional[ModeController]" = None
    global_mode: "Optional[GlobalOverflowMode]" = None

    def require_controller(self) -> "ModeController":
        if self.controller is None:
            raise LookupError("This command needs a document")
        return self.controller

    def require_global_mode(self) -> "GlobalOverflowMode":
        if self.global_mode is None:
            raise LookupError("This command needs a workspace")
        return self.global_mode


class ModeCommand(ABC):
    """Base class for mode commands."""

    @abstractmethod
    def execute(self, context: CommandContext, argument: Any = None) -> bool:
        """Execute the command.

        Args:
            context: Controller and global mode to act on
            argument: Optional command argument (e.g. a limit)

        Returns:
            True if highlighting is enabled afterwards
        """
        pass


class EnableCommand(ModeCommand):
    def execute(self, context, argument=None):
        controller = context.require_controller()
        controller.enable()
        return controller.enabled


class DisableCommand(ModeCommand):
    def execute(self, context, argument=None):
        controller = context.require_controller()
        controller.disable()
        return controller.enabled


class ToggleCommand(ModeCommand):
    def execute(self, context, argument=None):
        controller = context.require_controller()
        controller.toggle()
        return controller.enabled


class ToggleIfApplicableCommand(ModeCommand):
    def execute(self, context, argument=None):
        return context.require_controller().toggle_if_applicable()


class SetLimitCommand(ModeCommand):
    """Set the limit from the argument; the mode state is left as is.

    Without an argument the limit last picked in this session is reused.
    """

    def execute(self, context, argument=None):
        if argument is None:
            argument = get_session().get(SessionKeys.LAST_COLUMN_LIMIT)
        # Reject bad input here so it never reaches the scanner
        limit = validate_limit(argument)
        controller = context.require_controller()
        controller.set_limit(limit)
        return controller.enabled


class SetLimitAndEnableCommand(ModeCommand):
    """Set a fixed limit, then enable."""

    def __init__(self, limit: int):
        self.limit = validate_limit(limit)

    def execute(self, context, argument=None):
        controller = context.require_controller()
        controller.set_limit(self.limit)
        controller.enable()
        return controller.enabled


class GlobalModeCommand(ModeCommand):
    """Toggle auto-enabling on open; a truthy/falsy argument forces a state."""

    def execute(self, context, argument=None):
        global_mode = context.require_global_mode()
        if argument is None:
            global_mode.toggle()
        elif argument:
            global_mode.enable()
        else:
            global_mode.disable()
        return global_mode.enabled


# One set-and-enable command per preset limit
PRESET_COMMANDS: Dict[int, ModeCommand] = {
    60: SetLimitAndEnableCommand(60),
    70: SetLimitAndEnableCommand(70),
    80: SetLimitAndEnableCommand(80),
    90: SetLimitAndEnableCommand(90),
    100: SetLimitAndEnableCommand(100),
}


class CommandRegistry:
    """Registry mapping command names to commands."""

    def __init__(self):
        self._commands: Dict[str, ModeCommand] = {}
        self._setup_default_commands()

    def _setup_default_commands(self):
        self.register("columnmark-mode", ToggleCommand())
        self.register("columnmark-enable", EnableCommand())
        self.register("columnmark-disable", DisableCommand())
        self.register("columnmark-toggle-if-applicable", ToggleIfApplicableCommand())
        self.register("columnmark-set-limit", SetLimitCommand())
        self.register("global-columnmark-mode", GlobalModeCommand())
        for limit, command in PRESET_COMMANDS.items():
            self.register(f"columnmark-{limit}", command)

    def register(self, name: str, command: ModeCommand):
        self._commands[name] = command

    def get_command(self, name: str) -> Optional[ModeCommand]:
        return self._commands.get(name)

    @property
    def names(self) -> list[str]:
        return sorted(self._commands)

    def execute(self, name: str, context: CommandContext, argument: Any = None) -> bool:
        """Run the named command.

        Raises:
            KeyError: if no command has that name
            InvalidLimitError: if a limit argument is not a positive integer
        """
        command = self.get_command(name)
        if command is None:
            raise KeyError(f"Unknown command: {name}")
        return command.execute(context, argument)
