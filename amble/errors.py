"""
Error types for amble
"""
from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Tag carried by every amble error, rendered as the message prefix"""
    IO = 'IoError'
    SYSTEM_TIME = 'SystemTimeError'
    WALK = 'WalkDirError'
    CONFIG = 'ConfigError'

    def __str__(self) -> str:
        return self.value


class AmbleError(Exception):
    """Base class for all amble errors"""

    kind = ErrorKind.IO

    def __init__(self, message: str, path: Optional[str] = None,
                 kind: Optional[ErrorKind] = None):
        super().__init__(message)
        self.message = message
        self.path = path
        if kind is not None:
            self.kind = kind

    def __str__(self) -> str:
        return f"{self.kind}: {self.message}"

    @classmethod
    def from_os_error(cls, error: OSError, path: Optional[str] = None) -> 'AmbleError':
        """Wrap an OSError, keeping the path it was raised for"""
        return cls(str(error), path=path or error.filename)


class ConfigError(AmbleError):
    """Invalid scan configuration; raised before any traversal starts"""

    kind = ErrorKind.CONFIG


class MetadataError(AmbleError):
    """A timestamp could not be read or compared for one entry"""


class TraversalError(AmbleError):
    """The walk itself failed at a node: unreadable directory, link loop, broken link"""

    kind = ErrorKind.WALK
