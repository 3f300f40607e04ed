"""
Audit Log.

Append-only plain-text record of every prompt, rendered choice and turn
failure. Separate from diagnostic logging: one line per event, no structured
fields, and the file is readable by its owner only.

Line format:
    INFO: 2026/10/19 14:03:11 session.py:88: Ask: Hello

Usage:
    with open_audit_log("ChatGPT.log") as audit:
        audit.info("Ask: %s", prompt)
"""

import logging
import os
from pathlib import Path
from typing import Any

AUDIT_LOGGER_NAME = "audit"
AUDIT_FORMAT = "%(levelname)s: %(asctime)s %(filename)s:%(lineno)d: %(message)s"
AUDIT_DATE_FORMAT = "%Y/%m/%d %H:%M:%S"
DEFAULT_FILE_MODE = 0o600

_OPEN_FLAGS = os.O_APPEND | os.O_CREAT | os.O_WRONLY


class OwnerOnlyFileHandler(logging.FileHandler):
    """FileHandler that creates its file with a restricted permission mode."""

    def __init__(self, filename: str | Path, file_mode: int = DEFAULT_FILE_MODE) -> None:
        self.file_mode = file_mode
        super().__init__(filename, mode="a", encoding="utf-8")

    def _open(self):
        fd = os.open(self.baseFilename, _OPEN_FLAGS, self.file_mode)
        return open(fd, self.mode, encoding=self.encoding, errors=self.errors)


class AuditLog:
    """
    Audit trail bound to a single file for the lifetime of the process.

    The file is opened when the AuditLog is created and released by close()
    (or on leaving the `with` block). Records carry the file and line of the
    code that called info() or error(), not of this module.
    """

    def __init__(self, path: str | Path, file_mode: int = DEFAULT_FILE_MODE) -> None:
        self.path = Path(path)
        self._handler = OwnerOnlyFileHandler(self.path, file_mode=file_mode)
        self._handler.setFormatter(logging.Formatter(AUDIT_FORMAT, AUDIT_DATE_FORMAT))

        self._logger = logging.getLogger(f"{AUDIT_LOGGER_NAME}.{self.path.resolve()}")
        self._logger.setLevel(logging.INFO)
        self._logger.propagate = False
        self._logger.addHandler(self._handler)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def info(self, message: str, *args: Any) -> None:
        self._logger.info(message, *args, stacklevel=2)

    def error(self, message: str, *args: Any) -> None:
        self._logger.error(message, *args, stacklevel=2)

    def close(self) -> None:
        """Flush and release the file handle. Safe to call twice."""
        if self._closed:
            return
        self._logger.removeHandler(self._handler)
        self._handler.flush()
        self._handler.close()
        self._closed = True

    def __enter__(self) -> "AuditLog":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def open_audit_log(path: str | Path, file_mode: int = DEFAULT_FILE_MODE) -> AuditLog:
    """Open (creating if needed) the audit log at path in append mode."""
    return AuditLog(path, file_mode=file_mode)
