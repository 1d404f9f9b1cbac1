"""
hmac_providers.py — Các HMAC provider có sẵn cho otp_core.

otp_core không tự tính HMAC; caller chọn một provider ở đây (hoặc tự viết)
với signature (algorithm, key, message) -> digest.

- hashlib_hmac: thư viện chuẩn hmac + hashlib, không cần cài thêm gì.
- cryptography_hmac: dùng backend OpenSSL của package `cryptography`.
"""

import hashlib
import hmac

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives import hmac as crypto_hmac

from otp_engine.otp_core import Algorithm, HMACProvider

_HASHLIB_DIGESTS = {
    Algorithm.SHA1: hashlib.sha1,
    Algorithm.SHA256: hashlib.sha256,
    Algorithm.SHA512: hashlib.sha512,
}

_CRYPTOGRAPHY_HASHES = {
    Algorithm.SHA1: hashes.SHA1,
    Algorithm.SHA256: hashes.SHA256,
    Algorithm.SHA512: hashes.SHA512,
}


def hashlib_hmac(algorithm: Algorithm, key: bytes, message: bytes) -> bytes:
    return hmac.new(key, message, _HASHLIB_DIGESTS[algorithm]).digest()


def cryptography_hmac(algorithm: Algorithm, key: bytes, message: bytes) -> bytes:
    h = crypto_hmac.HMAC(key, _CRYPTOGRAPHY_HASHES[algorithm]())
    h.update(message)
    return h.finalize()


PROVIDERS = {
    "hashlib": hashlib_hmac,
    "cryptography": cryptography_hmac,
}


def get_provider(name: str) -> HMACProvider:
    """Trả về provider theo tên ('hashlib' hoặc 'cryptography')."""
    try:
        return PROVIDERS[name]
    except KeyError:
        raise ValueError(f"Unknown HMAC provider {name!r}, expected one of {sorted(PROVIDERS)}") from None
