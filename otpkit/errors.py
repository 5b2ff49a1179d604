"""
errors.py — Exceptions raised by otpkit.

Every error derives from ValueError, so code that caught the old
``ValueError("Invalid Base32 secret")`` keeps working.
"""

from typing import Optional


class OTPError(ValueError):
    """Base class for all otpkit errors."""


class DecodeError(OTPError):
    """
    Base32 input contains a symbol outside the RFC 4648 alphabet.

    Attributes:
        position: index of the offending character in the input
        char: the offending character
    """

    def __init__(self, message: str, position: Optional[int] = None, char: Optional[str] = None):
        super().__init__(message)
        self.position = position
        self.char = char


class InvalidParameter(OTPError):
    """An OTP parameter (digits, counter, interval, time, window...) is out of range."""
