"""
Process Termination.

Ending the process is a capability handed to whoever needs it, never a
module-level switch. Production code receives ProcessTerminator; tests
receive PanicTerminator and assert on the raised ProcessTerminated.
"""

import sys
from typing import NoReturn, Protocol

EXIT_SUCCESS = 0
EXIT_FAILURE = 1


class Terminator(Protocol):
    """Callable that ends the process with the given exit status."""

    def __call__(self, code: int) -> NoReturn: ...


class ProcessTerminated(Exception):
    """Raised by PanicTerminator in place of exiting."""

    def __init__(self, code: int) -> None:
        self.code = code
        super().__init__(f"Process terminated with code={code}")


class ProcessTerminator:
    """Exit the interpreter via sys.exit."""

    def __call__(self, code: int) -> NoReturn:
        sys.exit(code)


class PanicTerminator:
    """Raise ProcessTerminated instead of exiting. For tests only."""

    def __call__(self, code: int) -> NoReturn:
        raise ProcessTerminated(code)
