"""
Application error hierarchy
"""


class AdaError(Exception):
    """Base class for all errors raised by Ada"""

    def __init__(self, message: str, cause: object = None):
        super().__init__(message)
        self.message = message
        self.cause = cause
