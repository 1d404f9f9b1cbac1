import pytest

from otp_engine.hmac_providers import cryptography_hmac, hashlib_hmac

# RFC 6238 Appendix B seeds (ASCII)
SECRET_SHA1 = b"12345678901234567890"
SECRET_SHA256 = b"12345678901234567890123456789012"
SECRET_SHA512 = b"1234567890123456789012345678901234567890123456789012345678901234"

# RFC 4226 Appendix D: HMAC-SHA1(SECRET_SHA1, counter) for counters 0..9
RFC4226_DIGESTS = [
    "cc93cf18508d94934c64b65d8ba7667fb7cde4b0",
    "75a48a19d4cbe100644e8ac1397eea747a2d33ab",
    "0bacb7fa082fef30782211938bc1c5e70416ff44",
    "66c28227d03a2d5529262ff016a1e6ef76557ece",
    "a904c900a64b35909874b33e61c5938a8e15ed1c",
    "a37e783d7b7233c083d4f62926c7a25f238d0316",
    "bc9cd28561042c83f219324d3c607256c03272ae",
    "a4fb960c0bc06e1eabb804e5b397cdc4b45596fa",
    "1b3c89f65e6c9e883012052823443f048b4332db",
    "1637409809a679dc698207310c8c7fc07290d9e5",
]
RFC4226_TRUNCATED = [
    1284755224, 1094287082, 137359152, 1726969429, 1640338314,
    868254676, 1918287922, 82162583, 673399871, 645520489,
]
RFC4226_HOTP = [
    "755224", "287082", "359152", "969429", "338314",
    "254676", "287922", "162583", "399871", "520489",
]


class TableProvider:
    """Answers from the RFC 4226 digest table only, no hashing at all."""

    def __call__(self, algorithm, key, message):
        assert key == SECRET_SHA1
        counter = int.from_bytes(message, "big")
        return bytes.fromhex(RFC4226_DIGESTS[counter])


class RecordingProvider:
    def __init__(self, inner=hashlib_hmac):
        self.inner = inner
        self.calls = []

    def __call__(self, algorithm, key, message):
        self.calls.append((algorithm, key, message))
        return self.inner(algorithm, key, message)


@pytest.fixture(params=[hashlib_hmac, cryptography_hmac], ids=["hashlib", "cryptography"])
def provider(request):
    return request.param


@pytest.fixture()
def table_provider():
    return TableProvider()


@pytest.fixture()
def recording_provider():
    return RecordingProvider()
