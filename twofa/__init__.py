"""twofa - TOTP codes from an encrypted local storage."""

__version__ = "1.0.0"
