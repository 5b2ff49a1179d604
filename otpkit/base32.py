"""
base32.py — RFC 4648 Base32 decoding (decode only).

Decoding is lenient in the same way most authenticator apps are:
- input is case-insensitive
- the first '=' ends the input; padding length and placement are not checked
- bits left over in an incomplete final byte are dropped

Every 8 symbols (40 bits) produce exactly 5 bytes, so the output length is
always ``5 * symbols_consumed // 8``.
"""

import re

from .errors import DecodeError

ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ234567"
PAD_CHAR = "="

# character -> 5-bit value, both ASCII cases; no Unicode case folding
_DECODE_MAP = {ch: i for i, ch in enumerate(ALPHABET)}
_DECODE_MAP.update({ch.lower(): i for i, ch in enumerate(ALPHABET) if ch.isalpha()})

# Bit-packing state machine, indexed by "bits already filled in the current byte".
# Each entry: (shift, emits, next_state). A positive shift moves the 5-bit value
# left into the byte; a negative shift moves it right and completes the byte,
# and the bits shifted out seed the next byte.
_TRANSITIONS = (
    (3, False, 5),
    (2, False, 6),
    (1, False, 7),
    (0, True, 0),
    (-1, True, 1),
    (-2, True, 2),
    (-3, True, 3),
    (-4, True, 4),
)

_SEPARATORS = re.compile(r"[\s-]+")


def decode_char(ch: str) -> int:
    """
    Return the 5-bit value of one Base32 character (case-insensitive).

    Raises:
        DecodeError: if ``ch`` is not in the alphabet ('=' included)
    """
    try:
        return _DECODE_MAP[ch]
    except KeyError:
        raise DecodeError(f"Invalid Base32 character {ch!r}", char=ch) from None


def decode(value: str) -> bytes:
    """
    Decode an RFC 4648 Base32 string into raw bytes.

    Arguments:
        value: Base32 text, e.g. "JBSWY3DPEHPK3PXP" or "32W353Y====";
            bytes / bytearray are read one character per byte

    Returns:
        bytes: decoded data ("" decodes to b"")

    Raises:
        DecodeError: on the first character that is neither in the alphabet
            nor '=' (characters after the first '=' are never looked at),
            or if ``value`` is not text or bytes
    """
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("latin-1")
    elif not isinstance(value, str):
        raise DecodeError(f"Base32 input must be str or bytes, got {type(value).__name__}")
    out = bytearray()
    current = 0
    state = 0
    for position, ch in enumerate(value):
        if ch == PAD_CHAR:
            break
        v = _DECODE_MAP.get(ch)
        if v is None:
            raise DecodeError(
                f"Invalid Base32 character {ch!r} at position {position}",
                position=position,
                char=ch,
            )
        shift, emits, state = _TRANSITIONS[state]
        if shift >= 0:
            current |= v << shift
        else:
            current |= v >> -shift
        if emits:
            out.append(current)
            # low bits that did not fit seed the next byte
            current = (v << (8 + shift)) & 0xFF if shift < 0 else 0
    return bytes(out)


def normalize(value: str) -> str:
    """
    Remove the spaces and dashes that apps use to group secrets for display.

    >>> normalize("jbsw y3dp-ehpk 3pxp")
    'jbswy3dpehpk3pxp'
    """
    return _SEPARATORS.sub("", value)
