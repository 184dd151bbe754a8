"""Exception types raised by dxpm.

Every error derives from DxpmError and carries the exit code main() uses when
the error reaches the top of the command.
"""

from __future__ import annotations

from typing import Optional, Sequence

from constants import ExitCodes


class DxpmError(Exception):
    """Base class for all dxpm failures."""

    exit_code = ExitCodes.USAGE_ERROR


class InvalidArgument(DxpmError):
    """A command-line value is unusable, such as a path that does not exist."""

    exit_code = ExitCodes.USAGE_ERROR


class ToolNotFound(DxpmError):
    """The external CLI is not on the search path."""

    exit_code = ExitCodes.PRECONDITION_ERROR

    def __init__(self, tool: str):
        self.tool = tool
        super().__init__(f"{tool} CLI not found on PATH")


class ProjectNotFound(DxpmError):
    """No project manifest exists in the working directory or its parents."""

    exit_code = ExitCodes.PRECONDITION_ERROR

    def __init__(self, start: str, marker: str):
        self.start = start
        self.marker = marker
        super().__init__(f"No {marker} found in {start} or any parent directory")


class ResolutionFailure(DxpmError):
    """An alias or id did not match any known entity."""

    exit_code = ExitCodes.RESOLUTION_ERROR

    def __init__(self, kind: str, alias: str):
        self.kind = kind
        self.alias = alias
        super().__init__(f"Failed to locate {kind} with alias: {alias}")


class SubprocessFailure(DxpmError):
    """The external CLI exited non-zero or could not be run."""

    exit_code = ExitCodes.SUBPROCESS_ERROR

    def __init__(
        self,
        command: Sequence[str],
        returncode: Optional[int] = None,
        stderr: str = "",
        message: str = "",
    ):
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr
        detail = message or stderr.strip()
        text = f"Command '{' '.join(self.command)}' failed"
        if returncode is not None:
            text += f" with exit code {returncode}"
        if detail:
            text += f": {detail}"
        super().__init__(text)


class ManifestIOFailure(DxpmError):
    """The project manifest could not be read, parsed, or written."""

    exit_code = ExitCodes.MANIFEST_ERROR

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Project file {path}: {reason}")


class MultipleRecordsFailure(DxpmError):
    """A query that must match a single record matched several."""

    exit_code = ExitCodes.INVARIANT_ERROR

    def __init__(self, entity: str, identifier: str, size: int):
        self.entity = entity
        self.identifier = identifier
        self.size = size
        super().__init__(f"More than 1 {entity} with ID: {identifier} ({size} records)")


class CyclicDependency(DxpmError):
    """A package version depends on itself through its dependency chain."""

    exit_code = ExitCodes.INVARIANT_ERROR

    def __init__(self, path: Sequence[str]):
        self.path = list(path)
        super().__init__("Dependency cycle detected: " + " -> ".join(self.path))
