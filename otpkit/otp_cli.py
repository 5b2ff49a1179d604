#!/usr/bin/env python3
"""
otp_cli.py — CLI wrapper for otp_core.py / base32.py

Subcommands:
- decode : print a Base32 secret as hex
- hotp   : generate an HOTP code for a counter
- totp   : show the current TOTP code (once, or refreshing with --watch)
- verify : check an OTP code (TOTP or HOTP)

The secret is given with --secret or the OTPKIT_SECRET environment variable.

eg..:
    otpkit decode JBSWY3DPEHPK3PXP
    otpkit hotp --secret JBSWY3DPEHPK3PXP --counter 42
    otpkit totp --secret JBSWY3DPEHPK3PXP --digits 8 --period 60
    otpkit --verbose verify totp --secret JBSWY3DPEHPK3PXP --code 123456
"""

import argparse
import logging
import os
import sys
import time

from . import base32, otp_core
from .errors import OTPError

SECRET_ENV = "OTPKIT_SECRET"

EXIT_OK = 0
EXIT_INVALID_CODE = 1
EXIT_USAGE = 2

logger = logging.getLogger(__name__)


def _load_key(args) -> bytes:
    secret = args.secret or os.environ.get(SECRET_ENV)
    if not secret:
        raise OTPError(f"no secret given: pass --secret or set {SECRET_ENV}")
    key = base32.decode(base32.normalize(secret))
    logger.debug("Decoded %d-byte key from Base32 secret", len(key))
    return key


def _now(args) -> int:
    return args.now if args.now is not None else otp_core.system_clock()


# --- CLI command handlers ---
def cmd_decode(args):
    key = base32.decode(base32.normalize(args.value))
    print(key.hex())
    return EXIT_OK


def cmd_hotp(args):
    key = _load_key(args)
    logger.debug("HOTP: HMAC-SHA1(key=secret, msg=counter=%d)", args.counter)
    code = otp_core.hotp(key, args.counter, args.digits)
    print(f"HOTP({args.digits}d, counter={args.counter}): {code}")
    return EXIT_OK


def cmd_totp(args):
    if args.watch and args.now is not None:
        raise OTPError("--watch follows the system clock and cannot be combined with --now")
    key = _load_key(args)
    if not args.watch:
        now = _now(args)
        code = otp_core.totp(key, args.t0, args.period, now, args.digits)
        remaining = otp_core.time_remaining(now, args.t0, args.period)
        logger.debug("TOTP: time=%d, counter=%d", now, otp_core.time_counter(now, args.t0, args.period))
        print(f"TOTP ({args.digits}d): {code}  (valid ~{remaining:2d}s)")
        return EXIT_OK

    print(f"Press Ctrl+C to quit. Generating {args.digits}-digit TOTP every {args.period}s...\n")
    last_code = None
    try:
        while True:
            code, remaining = otp_core.totp_now(
                key, t0=args.t0, interval=args.period, digits=args.digits
            )
            if code != last_code:
                print(f"TOTP ({args.digits}d): {code}  (valid ~{remaining:2d}s)")
                last_code = code
            else:
                print(f".. {remaining:2d}s left", end='\r', flush=True)
            time.sleep(1)
    except KeyboardInterrupt:
        print("\nBye.")
    return EXIT_OK


def cmd_verify_totp(args):
    key = _load_key(args)
    now = _now(args)
    logger.debug("Checking TOTP at time=%d with window=+/-%d", now, args.window)
    ok = otp_core.verify_totp(
        key,
        args.code,
        now,
        t0=args.t0,
        interval=args.period,
        digits=args.digits,
        window=args.window,
    )
    if ok:
        print("[+] TOTP code is VALID")
        return EXIT_OK
    print("[-] TOTP code is INVALID")
    return EXIT_INVALID_CODE


def cmd_verify_hotp(args):
    key = _load_key(args)
    logger.debug("Checking HOTP counters %d..%d", args.counter, args.counter + args.look_ahead)
    ok, new_counter = otp_core.verify_hotp(
        key,
        args.code,
        args.counter,
        digits=args.digits,
        look_ahead=args.look_ahead,
    )
    if ok:
        print(f"[+] HOTP code is VALID (next counter = {new_counter})")
        return EXIT_OK
    print("[-] HOTP code is INVALID")
    return EXIT_INVALID_CODE


def cmd_help(args):
    print("'otpkit -h' for help.")
    return EXIT_OK


# --- Argparse builder ---
def _add_secret(p: argparse.ArgumentParser) -> None:
    p.add_argument("--secret", help=f"Base32 secret (default: ${SECRET_ENV})")


def _add_digits(p: argparse.ArgumentParser) -> None:
    p.add_argument("--digits", type=int, default=otp_core.DEFAULT_DIGITS,
                   choices=otp_core.VALID_DIGITS, help="Number of OTP digits")


def _add_time(p: argparse.ArgumentParser) -> None:
    p.add_argument("--period", type=int, default=otp_core.DEFAULT_TIME_STEP,
                   help="TOTP time step (seconds)")
    p.add_argument("--t0", type=int, default=otp_core.DEFAULT_T0,
                   help="TOTP start time (epoch seconds)")
    p.add_argument("--now", type=int, help="Use this epoch time instead of the system clock")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="otpkit", description="Base32 decoding and TOTP/HOTP (HMAC-SHA1) codes")
    p.add_argument("--verbose", action="store_true", help="Verbose output")
    sub = p.add_subparsers(dest="cmd")
    p.set_defaults(func=cmd_help)

    # decode
    pd = sub.add_parser("decode", help="Decode a Base32 secret and print it as hex")
    pd.add_argument("value", help="Base32 text")
    pd.set_defaults(func=cmd_decode)

    # hotp
    ph = sub.add_parser("hotp", help="Generate HOTP code for a specific counter")
    _add_secret(ph)
    ph.add_argument("--counter", type=int, required=True)
    _add_digits(ph)
    ph.set_defaults(func=cmd_hotp)

    # totp
    pt = sub.add_parser("totp", help="Show the current TOTP code")
    _add_secret(pt)
    _add_digits(pt)
    _add_time(pt)
    pt.add_argument("--watch", action="store_true",
                    help="Refresh every second from the system clock until Ctrl+C (not with --now)")
    pt.set_defaults(func=cmd_totp)

    # verify
    pv = sub.add_parser("verify", help="Verify an OTP code (TOTP or HOTP)")
    sub_v = pv.add_subparsers(dest="verify_type", required=True)

    pvt = sub_v.add_parser("totp", help="Verify a TOTP code")
    _add_secret(pvt)
    pvt.add_argument("--code", required=True, help="OTP code to verify")
    _add_digits(pvt)
    _add_time(pvt)
    pvt.add_argument("--window", type=int, default=1, help="Allowed +/- step window")
    pvt.set_defaults(func=cmd_verify_totp)

    pvh = sub_v.add_parser("hotp", help="Verify a HOTP code")
    _add_secret(pvh)
    pvh.add_argument("--code", required=True, help="OTP code to verify")
    pvh.add_argument("--counter", type=int, required=True, help="Current HOTP counter")
    _add_digits(pvh)
    pvh.add_argument("--look-ahead", type=int, default=0, help="Allowed counter look-ahead")
    pvh.set_defaults(func=cmd_verify_hotp)

    return p


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="[+] %(message)s",
    )


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)
    try:
        return args.func(args)
    except OTPError as e:
        parser.error(str(e))


if __name__ == "__main__":
    sys.exit(main())
