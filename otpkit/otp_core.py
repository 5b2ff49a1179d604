#!/usr/bin/env python3
"""
otp_core.py — Core library for HOTP (RFC 4226) / TOTP (RFC 6238).

Goals:
- Pure functions only: no file I/O, no printing, no clock reads inside the
  algorithms. The current time is always passed in (see ``totp_now`` for the
  one helper that reads an injected clock).
- Keys are raw bytes. Use ``otpkit.base32.decode`` first when a secret is
  provisioned as Base32 text.
- HMAC-SHA1 only, as used by Google Authenticator and most tokens. The keyed
  hash is injectable so another HMAC-SHA1 implementation can be swapped in.
"""

from typing import Callable, Tuple
import hashlib
import hmac
import math
import numbers
import struct
import time

from .errors import InvalidParameter

# --- Config / constants ----------------------------------------------------
DEFAULT_DIGITS = 6          # standard: 6 digits
VALID_DIGITS = (6, 7, 8)
DEFAULT_TIME_STEP = 30      # TOTP step (seconds)
DEFAULT_T0 = 0              # Unix epoch
DIGEST_SIZE = 20            # HMAC-SHA1 output length
MAX_COUNTER = 2 ** 64 - 1

KeyedHash = Callable[[bytes, bytes], bytes]
Clock = Callable[[], int]


# --- Keyed hash primitives -------------------------------------------------
def hmac_sha1(key: bytes, message: bytes) -> bytes:
    """HMAC-SHA1 via the standard library (default primitive)."""
    return hmac.new(key, message, hashlib.sha1).digest()


def cryptography_hmac_sha1(key: bytes, message: bytes) -> bytes:
    """
    HMAC-SHA1 via the OpenSSL-backed ``cryptography`` package.

    Same contract as ``hmac_sha1``: any key length, 20-byte digest.
    """
    from cryptography.hazmat.primitives import hashes
    from cryptography.hazmat.primitives import hmac as crypto_hmac

    h = crypto_hmac.HMAC(bytes(key), hashes.SHA1())
    h.update(message)
    return h.finalize()


def system_clock() -> int:
    """Seconds since the Unix epoch, truncated to an int."""
    return int(time.time())


# --- Validation ------------------------------------------------------------
def _is_int(value) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


def _check_digits(digits) -> None:
    if not _is_int(digits) or digits not in VALID_DIGITS:
        raise InvalidParameter(f"digits must be one of {VALID_DIGITS}, got {digits!r}")


def _check_counter(counter) -> None:
    if not _is_int(counter) or not 0 <= counter <= MAX_COUNTER:
        raise InvalidParameter(f"counter must be an integer in 0..2**64-1, got {counter!r}")


def _check_key(key) -> None:
    if not isinstance(key, (bytes, bytearray, memoryview)):
        raise InvalidParameter(f"key must be bytes, got {type(key).__name__}")


def _to_seconds(value, name: str) -> int:
    if _is_int(value):
        return int(value)
    if isinstance(value, numbers.Real) and not isinstance(value, bool) and math.isfinite(value):
        return math.floor(value)
    raise InvalidParameter(f"{name} must be a number of seconds, got {value!r}")


# --- RFC helpers -----------------------------------------------------------
def int_to_bytes(i: int) -> bytes:
    """
    Encode a counter as the 8-byte big-endian message required by RFC 4226.

    Example: int_to_bytes(1) -> b'\\x00\\x00\\x00\\x00\\x00\\x00\\x00\\x01'

    Raises:
        InvalidParameter: if ``i`` does not fit in an unsigned 64-bit integer
    """
    _check_counter(i)
    return struct.pack(">Q", i)


def dynamic_truncate(hmac_digest: bytes) -> int:
    """
    Apply RFC 4226 dynamic truncation.

    - offset = low nibble of byte 19 (0..15)
    - read 4 bytes from offset, big-endian
    - clear the most significant bit -> 31-bit unsigned integer

    Arguments:
        hmac_digest: 20-byte HMAC-SHA1 digest
    Raises:
        InvalidParameter: if the digest is not 20 bytes long
    """
    if len(hmac_digest) != DIGEST_SIZE:
        raise InvalidParameter(
            f"keyed hash must return {DIGEST_SIZE} bytes, got {len(hmac_digest)}"
        )
    # offset <= 15, so offset + 3 <= 18 stays inside the digest
    offset = hmac_digest[DIGEST_SIZE - 1] & 0x0F
    return struct.unpack(">I", bytes(hmac_digest[offset:offset + 4]))[0] & 0x7FFFFFFF


def hotp(
    key: bytes,
    counter: int,
    digits: int = DEFAULT_DIGITS,
    keyed_hash: KeyedHash = hmac_sha1,
) -> str:
    """
    Generate an HOTP code (RFC 4226).

    Steps:
    1. Message = 8-byte counter (big-endian)
    2. HMAC-SHA1(key, message)
    3. Dynamic truncate -> 31-bit value P
    4. otp = P % 10^digits, zero-padded to exactly ``digits`` characters

    Arguments:
        key: raw secret bytes (any length)
        counter: unsigned 64-bit counter
        digits: code length, 6, 7 or 8
        keyed_hash: HMAC-SHA1 implementation, ``(key, message) -> 20 bytes``

    Returns:
        str: zero-padded HOTP code

    Raises:
        InvalidParameter: non-bytes key, bad digits or counter, or a wrong-size digest
    """
    _check_key(key)
    _check_digits(digits)
    msg = int_to_bytes(counter)
    digest = keyed_hash(bytes(key), msg)
    dbc = dynamic_truncate(digest)
    return str(dbc % (10 ** digits)).zfill(digits)


def time_counter(now: int, t0: int = DEFAULT_T0, interval: int = DEFAULT_TIME_STEP) -> int:
    """
    TOTP counter for ``now``: floor((now - t0) / interval).

    Raises:
        InvalidParameter: if interval <= 0, t0 < 0 or now < t0
    """
    if not _is_int(interval) or interval <= 0:
        raise InvalidParameter(f"interval must be a positive integer, got {interval!r}")
    t0 = _to_seconds(t0, "t0")
    now = _to_seconds(now, "now")
    if t0 < 0:
        raise InvalidParameter(f"t0 must not be negative, got {t0}")
    if now < t0:
        raise InvalidParameter(f"current time {now} is before t0 {t0}")
    return (now - t0) // interval


def time_remaining(now: int, t0: int = DEFAULT_T0, interval: int = DEFAULT_TIME_STEP) -> int:
    """Seconds left before the code for ``now`` changes (1..interval)."""
    counter = time_counter(now, t0, interval)
    return _to_seconds(t0, "t0") + (counter + 1) * interval - _to_seconds(now, "now")


def totp(
    key: bytes,
    t0: int,
    interval: int,
    now: int,
    digits: int = DEFAULT_DIGITS,
    keyed_hash: KeyedHash = hmac_sha1,
) -> str:
    """
    Generate a TOTP code (RFC 6238): HOTP(counter = floor((now - T0) / X)).

    Arguments:
        key: raw secret bytes
        t0: start time in epoch seconds (usually DEFAULT_T0)
        interval: X in seconds (usually DEFAULT_TIME_STEP)
        now: current time in epoch seconds; never read from a clock here
        digits: code length, default 6

    Returns:
        str: the code for the window containing ``now``

    Raises:
        InvalidParameter: interval <= 0, t0 < 0, now < t0, bad digits
    """
    counter = time_counter(now, t0, interval)
    return hotp(key, counter, digits, keyed_hash)


def totp_now(
    key: bytes,
    clock: Clock = system_clock,
    t0: int = DEFAULT_T0,
    interval: int = DEFAULT_TIME_STEP,
    digits: int = DEFAULT_DIGITS,
    keyed_hash: KeyedHash = hmac_sha1,
) -> Tuple[str, int]:
    """
    Read ``clock`` once and return (code, remaining_seconds).

    Tests and callers that need determinism pass their own clock,
    e.g. ``clock=lambda: 1234567890``.
    """
    now = clock()
    code = totp(key, t0, interval, now, digits, keyed_hash)
    return code, time_remaining(now, t0, interval)


# --- OTP verification helpers ---------------------------------------------
def _matches(expected: str, code: str) -> bool:
    return hmac.compare_digest(expected.encode("ascii"), str(code).encode("utf-8"))


def verify_hotp(
    key: bytes,
    code: str,
    counter: int,
    digits: int = DEFAULT_DIGITS,
    look_ahead: int = 0,
    keyed_hash: KeyedHash = hmac_sha1,
) -> Tuple[bool, int]:
    """
    Check an HOTP code against counter .. counter + look_ahead.

    Returns:
        (True, next_counter) on a match, where next_counter is the matched
        counter + 1; otherwise (False, counter).

    Raises:
        InvalidParameter: bad digits or counter, or look_ahead < 0
    """
    _check_digits(digits)
    _check_counter(counter)
    if not _is_int(look_ahead) or look_ahead < 0:
        raise InvalidParameter(f"look_ahead must be a non-negative integer, got {look_ahead!r}")

    last = min(counter + look_ahead, MAX_COUNTER)
    for candidate in range(counter, last + 1):
        if _matches(hotp(key, candidate, digits, keyed_hash), code):
            return True, candidate + 1
    return False, counter


def verify_totp(
    key: bytes,
    code: str,
    now: int,
    t0: int = DEFAULT_T0,
    interval: int = DEFAULT_TIME_STEP,
    digits: int = DEFAULT_DIGITS,
    window: int = 1,
    keyed_hash: KeyedHash = hmac_sha1,
) -> bool:
    """
    Check a TOTP code, tolerating ``window`` steps of clock drift either way.

    Counters below 0 are skipped. Nothing is remembered between calls, so
    rejecting a replayed code is up to the caller.

    Raises:
        InvalidParameter: bad digits, interval, time ordering or window < 0
    """
    _check_digits(digits)
    if not _is_int(window) or window < 0:
        raise InvalidParameter(f"window must be a non-negative integer, got {window!r}")
    counter = time_counter(now, t0, interval)

    for offset in range(-window, window + 1):
        candidate = counter + offset
        if candidate < 0 or candidate > MAX_COUNTER:
            continue
        if _matches(hotp(key, candidate, digits, keyed_hash), code):
            return True
    return False
