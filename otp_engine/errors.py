"""
errors.py — Các lỗi cấu hình của otp_engine.

Tất cả đều kế thừa ValueError: secret / digits / time step sai là input sai,
nên caller đang bắt ValueError vẫn hoạt động bình thường.
"""


class OTPError(ValueError):
    """Base class for every configuration error raised by otp_engine."""


class EmptySecretError(OTPError):
    def __init__(self, message: str = "Secret key cannot be empty"):
        super().__init__(message)


class InvalidDigitsError(OTPError):
    def __init__(self, digits):
        self.digits = digits
        super().__init__(f"Invalid digits: Digits must be between 6 and 8, got {digits}")


class InvalidTimeStepError(OTPError):
    def __init__(self, time_step):
        self.time_step = time_step
        super().__init__(f"Invalid time step: Time step must be positive, got {time_step}")


class InvalidBase32StringError(OTPError):
    def __init__(self, detail: str = ""):
        message = "Invalid base32 encoded string"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
