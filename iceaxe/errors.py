"""Error hierarchy shared by the transfer engine and the vault layer"""

from enum import Enum
from typing import Optional


class ErrorCode(Enum):
    """Error categories"""
    REMOTE_FAILURE = "REMOTE_FAILURE"
    UNSUPPORTED_ARCHIVE_DESCRIPTION = "UNSUPPORTED_ARCHIVE_DESCRIPTION"
    OUT_OF_RANGE = "OUT_OF_RANGE"
    TRANSFER_FAILURE = "TRANSFER_FAILURE"
    INTERNAL = "INTERNAL"


class IceAxeError(Exception):
    """Base error carrying a code and the original cause"""

    def __init__(self, code: ErrorCode, message: str, source: Optional[BaseException] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.source = source

    def __str__(self):
        if self.source is not None:
            return f"{self.message}: {self.source}"
        return self.message


class RemoteFailure(IceAxeError):
    """Any error surfaced by the remote vault API"""

    def __init__(self, operation: str, source: Optional[BaseException] = None):
        super().__init__(ErrorCode.REMOTE_FAILURE, f"Remote operation {operation} failed", source)
        self.operation = operation


class UnsupportedMetadata(IceAxeError):
    """Archive description that cannot be parsed into ArchiveMeta"""

    def __init__(self, description: Optional[str], source: Optional[BaseException] = None):
        super().__init__(
            ErrorCode.UNSUPPORTED_ARCHIVE_DESCRIPTION,
            "Failed to parse archive description",
            source
        )
        self.description = description


class OutOfRange(IceAxeError, ValueError):
    """Seek position outside the chunk range"""

    def __init__(self, position: int, total_chunks: int):
        super().__init__(
            ErrorCode.OUT_OF_RANGE,
            f"Position {position} is out of boundaries: 0 and {total_chunks}"
        )
        self.position = position
        self.total_chunks = total_chunks


class TransferFailure(IceAxeError):
    """Background upload or download failed"""

    def __init__(self, message: str, source: Optional[BaseException] = None):
        super().__init__(ErrorCode.TRANSFER_FAILURE, message, source)
