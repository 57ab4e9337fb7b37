"""
Exceptions raised by bootstrap steps.
"""

from typing import Optional


def exit_status(returncode: int) -> int:
    """
    Map a subprocess return code to a process exit status.

    Signals show up as negative return codes and map to 128 + signal, as a
    shell reports them. Zero maps to 1 so a failure never looks successful.
    """
    if returncode < 0:
        return 128 - returncode
    return returncode or 1


class BootstrapError(Exception):
    """Base exception for fatal bootstrap failures"""

    def __init__(self, message: str, exit_code: int = 1) -> None:
        super().__init__(message)
        self.exit_code = exit_code
        # Set by the orchestrator to the partial run summary
        self.result = None


class CommandFailedError(BootstrapError):
    """Raised when a command exits non-zero, after any retries"""

    def __init__(self, message: str, returncode: int, command: Optional[str] = None) -> None:
        super().__init__(message, exit_code=exit_status(returncode))
        self.returncode = returncode
        self.command = command


class ToolNotFoundError(BootstrapError):
    """Raised when an installer succeeded but its binary is not on the search path"""
    pass


class PatchError(BootstrapError):
    """Raised when a downstream script cannot be patched"""
    pass


class FileSystemError(BootstrapError):
    """Raised when a project or shell file cannot be created, copied or changed"""
    pass
