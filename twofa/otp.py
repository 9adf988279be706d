from datetime import datetime
from typing import Optional, Union

import pyotp

from .errors import InvalidSecret
from .settings import Encoding, HashAlgorithm

DIGITS = 6


def generate_code(
    secret: str,
    encoding: Encoding,
    hash_algorithm: HashAlgorithm,
    window: int,
    for_time: Optional[Union[int, datetime]] = None,
) -> str:
    """Current TOTP code for SECRET, or the one valid at FOR_TIME."""
    try:
        key = encoding.to_base32(secret)
        totp = pyotp.TOTP(key, digits=DIGITS, digest=hash_algorithm.digest, interval=window)
        return totp.now() if for_time is None else totp.at(for_time)
    except ValueError as e:
        # binascii.Error and UnicodeEncodeError are ValueErrors too
        raise InvalidSecret(f"Secret is not valid {encoding.value}: {e}") from e
