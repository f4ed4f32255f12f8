"""
routewire/utils/exceptions.py

Custom exceptions for the project.
"""


class SourceParseError(Exception):
    """
    Exception raised when a source unit cannot be parsed into an AST.
    """

    def __init__(self, file_name: str, reason: str) -> None:
        super().__init__(f"{file_name}: {reason}")
        self.file_name = file_name
        self.reason = reason


class SourceTooLargeError(Exception):
    """
    Exception raised when a source unit is larger than the configured read limit.
    """

    def __init__(self, file_name: str, size_bytes: int, limit_bytes: int) -> None:
        super().__init__(f"{file_name}: {size_bytes} bytes exceeds limit of {limit_bytes}")
        self.file_name = file_name
        self.size_bytes = size_bytes
        self.limit_bytes = limit_bytes
