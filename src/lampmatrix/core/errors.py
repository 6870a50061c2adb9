"""
Error taxonomy for lampmatrix.

Every error records the stage it originated from (compile, start,
render, stop, device, library, color) since recovery differs per stage.
"""


class LampMatrixError(Exception):
    """Base class for all lampmatrix errors."""

    stage: str = "device"

    def __init__(self, message: str, stage: str | None = None) -> None:
        super().__init__(message)
        if stage is not None:
            self.stage = stage


class InvalidColor(LampMatrixError, ValueError):
    """A color could not be parsed or does not fit in 24 bits."""

    stage = "color"


class ParseError(LampMatrixError):
    """A script line could not be compiled."""

    stage = "compile"

    def __init__(self, line: int, reason: str) -> None:
        super().__init__(f"line {line}: {reason}")
        self.line = line
        self.reason = reason


class EmptyScript(ParseError):
    """Compilation produced no frames."""

    def __init__(self, line: int = 0) -> None:
        super().__init__(line, "script is empty or contains no valid commands")


class SchedulerStateError(LampMatrixError):
    """Operation rejected because of the scheduler's current state."""

    stage = "start"


class AlreadyRunning(SchedulerStateError):
    def __init__(self, script_name: str = "") -> None:
        message = "a script is already running"
        if script_name:
            message += f": {script_name}"
        super().__init__(message, stage="start")


class NotRunning(SchedulerStateError):
    def __init__(self) -> None:
        super().__init__("no script is running", stage="stop")


class DeviceLinkError(LampMatrixError):
    """The lamp could not be reached or rejected a command."""


class ScriptNotFound(LampMatrixError):
    """No script with that name exists in the library."""

    stage = "library"
