#!/usr/bin/env python3
"""
otp_cli.py — CLI wrapper cho otp_core.py

Cung cấp các subcommand:
- totp   : hiển thị mã TOTP hiện tại (hoặc --watch để cập nhật liên tục)
- hotp   : sinh mã HOTP cho một counter
- verify : xác minh mã OTP (TOTP/HOTP)
- uri    : in ra otpauth URI (TOTP/HOTP)

Secret (Base32) lấy từ --secret hoặc biến môi trường OTP_SECRET.
CLI không lưu gì xuống đĩa.
"""

import argparse
import logging
import os
import sys
import time

from otp_engine import otp_core
from otp_engine.errors import EmptySecretError, OTPError
from otp_engine.hmac_providers import PROVIDERS, get_provider

logger = logging.getLogger(__name__)

SECRET_ENV = "OTP_SECRET"


def _secret(args) -> str:
    secret = args.secret or os.environ.get(SECRET_ENV)
    if not secret:
        raise EmptySecretError(f"No secret given: use --secret or set {SECRET_ENV}")
    return secret


def _build_totp(args) -> otp_core.TOTP:
    return otp_core.TOTP.from_base32(
        _secret(args), time_step=args.period, digits=args.digits,
        algorithm=args.algorithm, t0=args.t0,
    )


def _build_hotp(args) -> otp_core.HOTP:
    return otp_core.HOTP.from_base32(_secret(args), digits=args.digits, algorithm=args.algorithm)


# --- CLI command handlers ---
def cmd_totp(args) -> int:
    totp = _build_totp(args)
    provider = get_provider(args.provider)
    if not args.watch:
        now = time.time()
        print(f"TOTP ({totp.digits}d): {totp.generate(provider, now)}  (valid ~{totp.time_remaining(now):.0f}s)")
        return 0

    print(f"Press Ctrl+C to quit. Generating {totp.digits}-digit TOTP every {args.period}s...\n")
    last_code = None
    try:
        while True:
            now = time.time()
            code = totp.generate(provider, now)
            remaining = totp.time_remaining(now)
            if code != last_code:
                print(f"TOTP ({totp.digits}d): {code}  (valid ~{remaining:2.0f}s)")
                last_code = code
            else:
                print(f".. {remaining:2.0f}s left", end="\r", flush=True)
            time.sleep(1)
    except KeyboardInterrupt:
        print("\nBye.")
    return 0


def cmd_hotp(args) -> int:
    hotp = _build_hotp(args)
    code = hotp.generate(args.counter, get_provider(args.provider))
    print(f"HOTP({hotp.digits}d, counter={args.counter}): {code}")
    return 0


def cmd_verify_totp(args) -> int:
    totp = _build_totp(args)
    ok = totp.validate(args.code, get_provider(args.provider), window=args.window)
    if ok:
        print("[+] TOTP code is VALID")
        return 0
    print("[-] TOTP code is INVALID")
    return 1


def cmd_verify_hotp(args) -> int:
    hotp = _build_hotp(args)
    ok, new_counter = hotp.validate(
        args.code, args.counter, get_provider(args.provider), look_ahead=args.look_ahead,
    )
    if ok:
        print(f"[+] HOTP code is VALID (next counter = {new_counter})")
        return 0
    print("[-] HOTP code is INVALID")
    return 1


def cmd_uri_totp(args) -> int:
    print(_build_totp(args).provisioning_uri(args.label, args.issuer))
    return 0


def cmd_uri_hotp(args) -> int:
    print(_build_hotp(args).provisioning_uri(args.label, args.issuer, initial_counter=args.counter))
    return 0


# --- Argparse builder ---
def _add_common(p: argparse.ArgumentParser, with_period: bool) -> None:
    p.add_argument("--secret", help=f"Base32 secret (default: ${SECRET_ENV})")
    p.add_argument("--digits", type=int, default=otp_core.DEFAULT_DIGITS, help="Number of OTP digits")
    p.add_argument("--algorithm", type=str.upper, default=otp_core.Algorithm.SHA1.value,
                   choices=[a.value for a in otp_core.Algorithm], help="HMAC algorithm")
    p.add_argument("--provider", default="hashlib", choices=sorted(PROVIDERS), help="HMAC implementation")
    p.add_argument("--verbose", action="store_true", help="Verbose output")
    if with_period:
        p.add_argument("--period", type=float, default=otp_core.DEFAULT_TIME_STEP,
                       help="TOTP time step (seconds)")
        p.add_argument("--t0", type=float, default=0, help="TOTP epoch offset (seconds)")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="otp-engine", description="TOTP/HOTP (RFC 6238 / RFC 4226) generator CLI")
    sub = p.add_subparsers(dest="cmd")

    # totp
    pt = sub.add_parser("totp", help="Show the current TOTP code")
    _add_common(pt, with_period=True)
    pt.add_argument("--watch", action="store_true", help="Refresh every second until Ctrl+C")
    pt.set_defaults(func=cmd_totp)

    # hotp
    ph = sub.add_parser("hotp", help="Generate HOTP code for a specific counter")
    _add_common(ph, with_period=False)
    ph.add_argument("--counter", type=int, required=True)
    ph.set_defaults(func=cmd_hotp)

    # verify
    pv = sub.add_parser("verify", help="Verify an OTP code (TOTP or HOTP)")
    sub_v = pv.add_subparsers(dest="verify_type")

    pvt = sub_v.add_parser("totp", help="Verify a TOTP code")
    _add_common(pvt, with_period=True)
    pvt.add_argument("--code", required=True, help="OTP code to verify")
    pvt.add_argument("--window", type=int, default=otp_core.DEFAULT_WINDOW, help="Allowed +/- step window")
    pvt.set_defaults(func=cmd_verify_totp)

    pvh = sub_v.add_parser("hotp", help="Verify a HOTP code")
    _add_common(pvh, with_period=False)
    pvh.add_argument("--code", required=True, help="OTP code to verify")
    pvh.add_argument("--counter", type=int, required=True, help="Current HOTP counter")
    pvh.add_argument("--look-ahead", type=int, default=0, help="Allowed counter look-ahead")
    pvh.set_defaults(func=cmd_verify_hotp)

    # uri
    pu = sub.add_parser("uri", help="Print otpauth URI for TOTP/HOTP")
    sub_u = pu.add_subparsers(dest="uri_type")

    put = sub_u.add_parser("totp", help="otpauth://totp/ URI")
    _add_common(put, with_period=True)
    put.add_argument("--label", required=True, help="Account label, e.g. alice@example.com")
    put.add_argument("--issuer", help="Issuer label, e.g. MyService")
    put.set_defaults(func=cmd_uri_totp)

    puh = sub_u.add_parser("hotp", help="otpauth://hotp/ URI")
    _add_common(puh, with_period=False)
    puh.add_argument("--label", required=True, help="Account label, e.g. alice@example.com")
    puh.add_argument("--issuer", help="Issuer label, e.g. MyService")
    puh.add_argument("--counter", type=int, default=0, help="Initial counter")
    puh.set_defaults(func=cmd_uri_hotp)

    return p


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return 2

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="[%(levelname)s] %(name)s: %(message)s",
    )
    try:
        return args.func(args)
    except OTPError as e:
        logger.debug("configuration rejected", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
