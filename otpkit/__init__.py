"""
otpkit package
==============

RFC 4648 Base32 decoding plus HOTP / TOTP generation (RFC 4226 & RFC 6238).

──────────────────────────────────────────────
Core algorithms
──────────────────────────────────────────────
- Base32 decode:
  every 8 symbols (40 bits) -> 5 bytes; '=' ends the input,
  leftover bits of an incomplete byte are dropped.

- HOTP (HMAC-based One-Time Password):
  code = Truncate(HMAC-SHA1(key=secret, msg=counter)) mod 10^digits

- TOTP (Time-based One-Time Password):
  HOTP with counter = floor((now - T0) / timestep).
  The current time is always passed in by the caller.

──────────────────────────────────────────────
Quick example
──────────────────────────────────────────────
>>> from otpkit import decode, hotp
>>> key = decode("7777777777777777")
>>> hotp(key, 0)
'724477'
"""

from .base32 import decode
from .errors import DecodeError, InvalidParameter, OTPError
from .otp_core import (
    DEFAULT_DIGITS,
    DEFAULT_T0,
    DEFAULT_TIME_STEP,
    cryptography_hmac_sha1,
    hmac_sha1,
    hotp,
    system_clock,
    totp,
    totp_now,
    verify_hotp,
    verify_totp,
)

__version__ = "0.1.0"

__all__ = [
    "decode",
    "hotp",
    "totp",
    "totp_now",
    "verify_hotp",
    "verify_totp",
    "hmac_sha1",
    "cryptography_hmac_sha1",
    "system_clock",
    "OTPError",
    "DecodeError",
    "InvalidParameter",
    "DEFAULT_DIGITS",
    "DEFAULT_TIME_STEP",
    "DEFAULT_T0",
]
