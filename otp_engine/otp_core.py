"""
otp_core.py — Core library cho TOTP / HOTP (RFC 4226 / RFC 6238).

Mục tiêu:
- Chỉ chứa phần tính toán thuần (pure functions + immutable config), không
  đọc/ghi file, không network, không argparse.
- Không tự cài đặt HMAC: mọi phép HMAC đi qua một "HMAC provider" do caller
  truyền vào, dạng callable (algorithm, key, message) -> digest.
  Xem otp_engine.hmac_providers cho các provider có sẵn.

Lưu ý bảo mật:
- Secret không bao giờ xuất hiện trong repr() hay log.
- So sánh OTP dùng constant_time_compare (không short-circuit).
"""

import logging
import math
import os
import struct
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, Optional, Tuple, Union
from urllib.parse import quote, urlencode

from otp_engine import base32
from otp_engine.errors import EmptySecretError, InvalidDigitsError, InvalidTimeStepError

logger = logging.getLogger(__name__)

# --- Config / constants ----------------------------------------------------
DEFAULT_DIGITS = 6          # chuẩn: 6 chữ số
MIN_DIGITS = 6
MAX_DIGITS = 8
DEFAULT_TIME_STEP = 30      # TOTP step (giây)
DEFAULT_WINDOW = 1          # +/- 1 step cho clock drift
SECRET_BYTES = 20           # 160-bit secret (common practice)
COUNTER_MASK = 0xFFFFFFFFFFFFFFFF


class Algorithm(Enum):
    """HMAC algorithm selector; the core only forwards it to the provider."""

    SHA1 = "SHA1"
    SHA256 = "SHA256"
    SHA512 = "SHA512"

    @property
    def hash_length(self) -> int:
        """Expected digest length in bytes."""
        return _HASH_LENGTHS[self]

    @classmethod
    def parse(cls, name: Union[str, "Algorithm"]) -> "Algorithm":
        if isinstance(name, cls):
            return name
        try:
            return cls(str(name).upper())
        except ValueError:
            raise ValueError(
                f"Unsupported algorithm {name!r}, expected one of SHA1, SHA256, SHA512") from None


_HASH_LENGTHS = {
    Algorithm.SHA1: 20,
    Algorithm.SHA256: 32,
    Algorithm.SHA512: 64,
}

# (algorithm, key, message) -> digest of algorithm.hash_length bytes
HMACProvider = Callable[[Algorithm, bytes, bytes], bytes]
TimeLike = Union[None, int, float, datetime]


# --- Validation helpers ----------------------------------------------------
def _check_secret(secret) -> bytes:
    if not isinstance(secret, (bytes, bytearray, memoryview)):
        raise TypeError(f"secret must be bytes, got {type(secret).__name__}")
    secret = bytes(secret)
    if not secret:
        raise EmptySecretError()
    return secret


def _check_digits(digits) -> None:
    if isinstance(digits, bool) or not isinstance(digits, int) or not MIN_DIGITS <= digits <= MAX_DIGITS:
        raise InvalidDigitsError(digits)


def _check_time_step(time_step) -> None:
    # "not > 0" also rejects NaN
    if not time_step > 0:
        raise InvalidTimeStepError(time_step)


def _unix_seconds(at: TimeLike) -> Union[int, float]:
    if at is None:
        return time.time()
    if isinstance(at, datetime):
        return at.timestamp()
    if not math.isfinite(at):
        raise ValueError(f"Time must be a finite Unix timestamp, got {at}")
    return at


def generate_secret(length: int = SECRET_BYTES) -> bytes:
    """
    Sinh secret ngẫu nhiên từ os.urandom (CSPRNG).

    Dùng base32.encode(secret) để hiển thị / import vào Google Authenticator.
    """
    if length <= 0:
        raise EmptySecretError(f"Secret length must be positive, got {length}")
    return os.urandom(length)


# --- RFC helpers -----------------------------------------------------------
def int_to_bytes(counter: int) -> bytes:
    """
    Chuyển counter sang 8-byte big-endian như RFC4226 yêu cầu.

    Counter được ép về unsigned 64-bit (two's complement), nên -1 thành
    2**64 - 1 thay vì lỗi struct.error.

    Ví dụ: int_to_bytes(1) -> b'\\x00\\x00\\x00\\x00\\x00\\x00\\x00\\x01'
    """
    return struct.pack(">Q", counter & COUNTER_MASK)


def dynamic_truncate(hmac_digest: bytes) -> int:
    """
    Áp dụng dynamic truncation theo RFC4226 §5.3.

    - offset = last_byte & 0x0F
    - Lấy 4 bytes từ offset, clear MSB (0x7F) cho byte đầu
    - Trả về integer 31-bit (unsigned)

    Raises:
        IndexError: nếu digest rỗng hoặc ngắn hơn offset + 4. Đây là lỗi của
            HMAC provider (vi phạm contract), không phải input của user.
    """
    offset = hmac_digest[-1] & 0x0F
    return (
        ((hmac_digest[offset] & 0x7F) << 24)
        | ((hmac_digest[offset + 1] & 0xFF) << 16)
        | ((hmac_digest[offset + 2] & 0xFF) << 8)
        | (hmac_digest[offset + 3] & 0xFF)
    )


def constant_time_compare(a: str, b: str) -> bool:
    """
    So sánh hai chuỗi OTP không rò rỉ timing.

    - Khác độ dài -> trả False ngay (độ dài OTP là cố định, công khai).
    - Cùng độ dài -> XOR-accumulate mọi vị trí, chỉ so sánh một lần ở cuối,
      không short-circuit ở ký tự sai đầu tiên.
    """
    if len(a) != len(b):
        return False
    result = 0
    for char_a, char_b in zip(a, b):
        result |= ord(char_a) ^ ord(char_b)
    return result == 0


def hotp(
    secret: bytes,
    counter: int,
    hmac_provider: HMACProvider,
    digits: int = DEFAULT_DIGITS,
    algorithm: Algorithm = Algorithm.SHA1,
) -> str:
    """
    Sinh mã HOTP theo RFC4226.

    Steps:
    1. Message = 8-byte counter (big-endian)
    2. digest = hmac_provider(algorithm, secret, message)
    3. Dynamic truncate -> dbc
    4. otp = dbc % 10^digits
    5. Zero-pad để có đúng "digits" chữ số

    Không validate tham số: dùng HOTP / TOTP để có config đã được kiểm tra.
    Exceptions từ hmac_provider được propagate nguyên vẹn.
    """
    msg = int_to_bytes(counter)
    logger.debug("HOTP: HMAC-%s(key=secret, msg=counter=%d)", algorithm.value, counter & COUNTER_MASK)
    digest = hmac_provider(algorithm, secret, msg)
    dbc = dynamic_truncate(digest)
    otp_val = dbc % (10 ** digits)
    return str(otp_val).zfill(digits)


def _otpauth_uri(kind: str, label: str, params: list, issuer: Optional[str]) -> str:
    if issuer is not None:
        params.append(("issuer", issuer))
    # label is a path segment: ':' and '@' are legal there
    return f"otpauth://{kind}/{quote(label, safe='@:')}?{urlencode(params, quote_via=quote)}"


# --- Configurations ----------------------------------------------------------
@dataclass(frozen=True)
class HOTP:
    """
    HOTP configuration (RFC 4226), validated once and immutable afterwards.

    Raises (at construction):
        EmptySecretError: secret rỗng
        InvalidDigitsError: digits ngoài [6, 8]
    """

    secret: bytes = field(repr=False)
    digits: int = DEFAULT_DIGITS
    algorithm: Algorithm = Algorithm.SHA1

    def __post_init__(self):
        object.__setattr__(self, "secret", _check_secret(self.secret))
        _check_digits(self.digits)
        object.__setattr__(self, "algorithm", Algorithm.parse(self.algorithm))

    @classmethod
    def from_base32(cls, secret_b32: str, digits: int = DEFAULT_DIGITS,
                    algorithm: Algorithm = Algorithm.SHA1) -> "HOTP":
        return cls(base32.decode(secret_b32), digits=digits, algorithm=algorithm)

    def generate(self, counter: int, hmac_provider: HMACProvider) -> str:
        return hotp(self.secret, counter, hmac_provider, self.digits, self.algorithm)

    def validate(self, candidate: str, counter: int, hmac_provider: HMACProvider,
                 look_ahead: int = 0) -> Tuple[bool, int]:
        """
        Xác minh mã HOTP, cho phép look-ahead để resync token.

        Trả về:
            (True, next_counter) nếu khớp tại counter + i (next_counter = counter + i + 1)
            (False, counter) nếu không khớp
        """
        for i in range(look_ahead + 1):
            test_counter = (counter + i) & COUNTER_MASK
            if constant_time_compare(candidate, self.generate(test_counter, hmac_provider)):
                logger.debug("HOTP validate: matched at look-ahead %d", i)
                return True, (test_counter + 1) & COUNTER_MASK
        return False, counter

    def provisioning_uri(self, label: str, issuer: Optional[str] = None,
                         initial_counter: int = 0) -> str:
        params = [
            ("secret", base32.encode(self.secret)),
            ("algorithm", self.algorithm.value),
            ("digits", self.digits),
            ("counter", initial_counter),
        ]
        return _otpauth_uri("hotp", label, params, issuer)


@dataclass(frozen=True)
class TOTP:
    """
    TOTP configuration (RFC 6238): HOTP với counter = floor((now - T0) / time_step).

    Raises (at construction):
        EmptySecretError: secret rỗng
        InvalidDigitsError: digits ngoài [6, 8]
        InvalidTimeStepError: time_step <= 0
    """

    secret: bytes = field(repr=False)
    time_step: float = DEFAULT_TIME_STEP
    digits: int = DEFAULT_DIGITS
    algorithm: Algorithm = Algorithm.SHA1
    t0: float = 0

    def __post_init__(self):
        object.__setattr__(self, "secret", _check_secret(self.secret))
        _check_digits(self.digits)
        _check_time_step(self.time_step)
        object.__setattr__(self, "algorithm", Algorithm.parse(self.algorithm))

    @classmethod
    def from_base32(cls, secret_b32: str, time_step: float = DEFAULT_TIME_STEP,
                    digits: int = DEFAULT_DIGITS, algorithm: Algorithm = Algorithm.SHA1,
                    t0: float = 0) -> "TOTP":
        return cls(base32.decode(secret_b32), time_step=time_step, digits=digits,
                   algorithm=algorithm, t0=t0)

    @property
    def hotp(self) -> HOTP:
        return HOTP(self.secret, digits=self.digits, algorithm=self.algorithm)

    def counter(self, at: TimeLike = None) -> int:
        """
        Tính counter T = floor((unix_time - T0) / time_step), ép về unsigned 64-bit.

        Arguments:
            at: epoch seconds (int/float) hoặc datetime; None -> time.time()

        Raises:
            ValueError: nếu at là inf / NaN (không phải thời điểm hợp lệ)
        """
        elapsed = _unix_seconds(at) - self.t0
        return int(elapsed // self.time_step) & COUNTER_MASK

    def generate(self, hmac_provider: HMACProvider, at: TimeLike = None) -> str:
        return hotp(self.secret, self.counter(at), hmac_provider, self.digits, self.algorithm)

    def validate(self, candidate: str, hmac_provider: HMACProvider, at: TimeLike = None,
                 window: int = DEFAULT_WINDOW) -> bool:
        """
        Xác minh mã TOTP trong cửa sổ [-window, +window] step quanh thời điểm `at`.

        - Duyệt offset tăng dần, trả True ở lần khớp đầu tiên.
        - window càng lớn càng chịu được lệch đồng hồ, nhưng tốn thêm HMAC
          và tăng khả năng chấp nhận mã cũ (replay).
        - Mã không khớp chỉ là kết quả False, không phải lỗi.
        """
        current = self.counter(at)
        logger.debug("TOTP validate: counter=%d, window=%d", current, window)
        for offset in range(-window, window + 1):
            test_counter = (current + offset) & COUNTER_MASK
            expected = hotp(self.secret, test_counter, hmac_provider, self.digits, self.algorithm)
            if constant_time_compare(candidate, expected):
                logger.debug("TOTP validate: matched at offset %+d", offset)
                return True
        return False

    def time_remaining(self, at: TimeLike = None) -> float:
        """Số giây còn lại của mã hiện tại, luôn trong (0, time_step]."""
        elapsed = (_unix_seconds(at) - self.t0) % self.time_step
        # float modulo of a tiny negative value can round up to time_step
        if elapsed >= self.time_step:
            elapsed = 0
        return float(self.time_step - elapsed)

    def provisioning_uri(self, label: str, issuer: Optional[str] = None) -> str:
        """
        Tạo otpauth:// URI để import vào ứng dụng Authenticator.

        otpauth://totp/{label}?secret=...&algorithm=...&digits=...&period=...[&issuer=...]

        Secret là base32 đầy đủ (có padding '=', được percent-encode thành %3D);
        period là time_step làm tròn xuống số giây nguyên.
        """
        params = [
            ("secret", base32.encode(self.secret)),
            ("algorithm", self.algorithm.value),
            ("digits", self.digits),
            ("period", int(self.time_step)),
        ]
        return _otpauth_uri("totp", label, params, issuer)
