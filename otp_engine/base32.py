"""
base32.py — RFC 4648 §5 Base32 codec cho secret OTP.

- encode: chuẩn RFC 4648, có padding '=' (giống base64.b32encode).
- decode: "tolerant": bỏ qua khoảng trắng và dấu '-', không phân biệt
  hoa/thường, padding '=' có hay không đều được. Authenticator apps
  thường hiển thị secret dạng "jbsw y3dp ehpk 3pxp", nên decode phải chịu
  được những biến thể đó.

Không dùng base64.b32decode() để decode: hàm đó từ chối input thiếu padding
và độ dài để lại bit thừa, trong khi secret thực tế hay gặp cả hai trường hợp.
"""

import base64

from otp_engine.errors import InvalidBase32StringError

ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ234567"
_LOOKUP = {char: index for index, char in enumerate(ALPHABET)}


def encode(data: bytes) -> str:
    """
    Mã hóa bytes sang Base32 (in hoa, có padding '=').

    Ví dụ: encode(b"foobar") -> "MZXW6YTBOI======"
    Empty input gives an empty string, with no padding.
    """
    return base64.b32encode(bytes(data)).decode("ascii")


def decode(text: str) -> bytes:
    """
    Giải mã chuỗi Base32 sang bytes.

    Steps:
    1. Bỏ ' ' và '-', chuyển in hoa, bỏ '=' ở cuối
    2. Mỗi ký tự -> 5 bit, dồn vào bit buffer
    3. Khi buffer có >= 8 bit -> xuất 1 byte (8 bit cao nhất)
    4. Các bit thừa (< 8) ở cuối là padding -> bỏ đi

    Raises:
        InvalidBase32StringError: nếu gặp ký tự ngoài bảng chữ cái
    """
    cleaned = text.replace(" ", "").replace("-", "").upper().rstrip("=")

    output = bytearray()
    buffer = 0
    bits = 0
    for position, char in enumerate(cleaned):
        value = _LOOKUP.get(char)
        if value is None:
            raise InvalidBase32StringError(f"unexpected character {char!r} at position {position}")
        buffer = (buffer << 5) | value
        bits += 5
        if bits >= 8:
            bits -= 8
            output.append((buffer >> bits) & 0xFF)
            # only the unread bits are kept
            buffer &= (1 << bits) - 1
    return bytes(output)
