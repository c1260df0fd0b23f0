"""
Errors raised by the signal scoring core.
"""

from typing import Optional


class ValidationError(ValueError):
    """
    Raised when a caller passes malformed arguments.

    Attributes:
        argument: Name of the argument that failed validation
        reason: Why it failed
    """

    def __init__(self, argument: str, reason: str, index: Optional[int] = None):
        self.argument = argument
        self.reason = reason
        self.index = index
        where = f"{argument}[{index}]" if index is not None else argument
        super().__init__(f"Invalid {where}: {reason}")
