"""
otp_engine package
==================

HOTP/TOTP theo chuẩn RFC 4226 & RFC 6238, kèm Base32 codec (RFC 4648 §5)
để trao đổi secret với các ứng dụng Authenticator.

──────────────────────────────────────────────
Giải thuật cốt lõi
──────────────────────────────────────────────
- HOTP (HMAC-based One-Time Password):
  code = Truncate(HMAC(key=secret, msg=counter)) mod 10^digits

- TOTP (Time-based One-Time Password):
  HOTP với counter = floor((timestamp - T0) / time_step)
  → Mặc định time_step = 30 giây, 6 chữ số, SHA1.

- Dynamic Truncation:
  Lấy 4 byte từ HMAC dựa vào offset (last byte & 0x0F), clear bit cao nhất.

- HMAC không được cài đặt trong core: caller truyền vào một provider
  (algorithm, key, message) -> digest. Xem otp_engine.hmac_providers.

──────────────────────────────────────────────
Ví dụ sử dụng nhanh
──────────────────────────────────────────────
>>> from otp_engine import TOTP, hashlib_hmac
>>> totp = TOTP(b"12345678901234567890", digits=8)
>>> totp.generate(hashlib_hmac, at=59)
'94287082'
>>> totp.validate("94287082", hashlib_hmac, at=59)
True
>>> totp.provisioning_uri("alice@example.com", issuer="MyService")
'otpauth://totp/alice@example.com?secret=GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ&algorithm=SHA1&digits=8&period=30&issuer=MyService'
"""

from otp_engine.base32 import decode as base32_decode
from otp_engine.base32 import encode as base32_encode
from otp_engine.errors import (
    EmptySecretError,
    InvalidBase32StringError,
    InvalidDigitsError,
    InvalidTimeStepError,
    OTPError,
)
from otp_engine.hmac_providers import cryptography_hmac, get_provider, hashlib_hmac
from otp_engine.otp_core import (
    HOTP,
    TOTP,
    Algorithm,
    HMACProvider,
    constant_time_compare,
    dynamic_truncate,
    generate_secret,
    hotp,
    int_to_bytes,
)

__all__ = [
    "Algorithm",
    "EmptySecretError",
    "HMACProvider",
    "HOTP",
    "InvalidBase32StringError",
    "InvalidDigitsError",
    "InvalidTimeStepError",
    "OTPError",
    "TOTP",
    "base32_decode",
    "base32_encode",
    "constant_time_compare",
    "cryptography_hmac",
    "dynamic_truncate",
    "generate_secret",
    "get_provider",
    "hashlib_hmac",
    "hotp",
    "int_to_bytes",
]
