import dataclasses

import pytest

from otp_engine.errors import (
    EmptySecretError,
    InvalidBase32StringError,
    InvalidDigitsError,
    InvalidTimeStepError,
    OTPError,
)
from otp_engine.otp_core import HOTP, TOTP, Algorithm, generate_secret


@pytest.mark.parametrize("cls", [HOTP, TOTP])
def test_empty_secret(cls):
    with pytest.raises(EmptySecretError, match="Secret key cannot be empty"):
        cls(b"")


@pytest.mark.parametrize("cls", [HOTP, TOTP])
@pytest.mark.parametrize("digits", [5, 9, 0, -6])
def test_invalid_digits(cls, digits):
    with pytest.raises(InvalidDigitsError, match=f"got {digits}"):
        cls(b"secret", digits=digits)


@pytest.mark.parametrize("digits", [6, 7, 8])
def test_valid_digits(digits):
    assert HOTP(b"secret", digits=digits).digits == digits
    assert TOTP(b"secret", digits=digits).digits == digits


def test_digits_must_be_int():
    with pytest.raises(InvalidDigitsError):
        HOTP(b"secret", digits=6.5)
    with pytest.raises(InvalidDigitsError):
        HOTP(b"secret", digits=True)


@pytest.mark.parametrize("time_step", [0, -1, -30.5, float("nan")])
def test_invalid_time_step(time_step):
    with pytest.raises(InvalidTimeStepError, match="Time step must be positive"):
        TOTP(b"secret", time_step=time_step)


def test_empty_secret_checked_first():
    with pytest.raises(EmptySecretError):
        TOTP(b"", digits=5, time_step=0)


@pytest.mark.parametrize("cls", [HOTP, TOTP])
def test_malformed_base32(cls):
    with pytest.raises(InvalidBase32StringError):
        cls.from_base32("INVALID!@#$%")


def test_base32_decoding_to_nothing_is_empty_secret():
    with pytest.raises(EmptySecretError):
        TOTP.from_base32("  --  ")


def test_errors_are_value_errors():
    for error in (EmptySecretError, InvalidDigitsError, InvalidTimeStepError, InvalidBase32StringError):
        assert issubclass(error, OTPError)
        assert issubclass(error, ValueError)


def test_secret_must_be_bytes():
    with pytest.raises(TypeError):
        HOTP("not bytes")
    with pytest.raises(TypeError):
        HOTP(20)


def test_secret_is_normalised_to_bytes():
    config = HOTP(bytearray(b"secret"))
    assert type(config.secret) is bytes


def test_configurations_are_immutable():
    totp = TOTP(b"secret")
    with pytest.raises(dataclasses.FrozenInstanceError):
        totp.digits = 8
    with pytest.raises(dataclasses.FrozenInstanceError):
        HOTP(b"secret").secret = b"other"


def test_secret_not_in_repr():
    assert "supersecret" not in repr(TOTP(b"supersecret"))
    assert "supersecret" not in repr(HOTP(b"supersecret"))


def test_defaults():
    totp = TOTP(b"secret")
    assert (totp.time_step, totp.digits, totp.algorithm, totp.t0) == (30, 6, Algorithm.SHA1, 0)


def test_algorithm_hash_lengths():
    assert Algorithm.SHA1.hash_length == 20
    assert Algorithm.SHA256.hash_length == 32
    assert Algorithm.SHA512.hash_length == 64


def test_algorithm_parse():
    assert Algorithm.parse("sha256") is Algorithm.SHA256
    assert Algorithm.parse(Algorithm.SHA512) is Algorithm.SHA512
    assert TOTP(b"secret", algorithm="Sha1").algorithm is Algorithm.SHA1
    with pytest.raises(ValueError, match="Unsupported algorithm"):
        Algorithm.parse("md5")


def test_generate_secret():
    assert len(generate_secret()) == 20
    assert len(generate_secret(32)) == 32
    assert generate_secret() != generate_secret()
    with pytest.raises(EmptySecretError):
        generate_secret(0)
