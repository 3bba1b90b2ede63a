
"""Error kinds raised by the Make 10 core and its collaborators"""


class Make10Error(Exception):
    pass


class ValidationError(Make10Error):
    """Rejected user input, e.g. an empty or over-long player name."""


class NetworkError(Make10Error):
    """Leaderboard transport failed or returned something unreadable."""


class UploadRejected(Make10Error):
    """The leaderboard server answered with status "error"."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class LogicError(Make10Error):
    """Programmer error: a primitive was handed a malformed grid."""
