import base64
import hashlib
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Mapping, Optional

from .errors import IncompleteSettings, MismatchedType, MissingSecret, NoData, UnknownValue
from .log import Logger

DEFAULT_WINDOW = 30
MAX_WINDOW = 2**32 - 1


class HashAlgorithm(Enum):
    SHA1 = "sha1"
    SHA256 = "sha256"
    SHA512 = "sha512"

    @classmethod
    def parse(cls, name: Any) -> "HashAlgorithm":
        for member in cls:
            if member.value == name:
                return member
        raise UnknownValue(f"Hash not supported: {name!r} (use sha1, sha256 or sha512)")

    @property
    def digest(self) -> Callable:
        return getattr(hashlib, self.value)


class Encoding(Enum):
    BASE32 = "base32"
    HEX = "hex"
    ASCII = "ascii"

    @classmethod
    def parse(cls, name: Any) -> "Encoding":
        for member in cls:
            if member.value == name:
                return member
        raise UnknownValue(f"Unsupported encoding: {name!r} (use base32, hex or ascii)")

    def to_base32(self, secret: str) -> str:
        """Raises ValueError when SECRET is not valid for this encoding."""
        if self is Encoding.BASE32:
            return "".join(secret.split()).upper()
        if self is Encoding.HEX:
            raw = bytes.fromhex(secret)
        else:
            raw = secret.encode("ascii")
        return base64.b32encode(raw).decode("ascii")


DEFAULT_HASH = HashAlgorithm.SHA512
DEFAULT_ENCODING = Encoding.BASE32


@dataclass(frozen=True)
class TwofaSettings:
    """
    OTP parameters for one application.

    Fields are optional while the value is being assembled; `complete()` is the
    only way to get a value that can generate a code or go back into storage.
    """

    secret: Optional[str] = None
    window: Optional[int] = None
    hash: Optional[HashAlgorithm] = None
    encoding: Optional[Encoding] = None

    @property
    def is_complete(self) -> bool:
        return bool(self.secret) and None not in (self.window, self.hash, self.encoding)

    def complete(self) -> "TwofaSettings":
        if not self.secret:
            raise MissingSecret("Secret is needed (-s/--secret)")
        return replace(
            self,
            window=DEFAULT_WINDOW if self.window is None else self.window,
            hash=self.hash or DEFAULT_HASH,
            encoding=self.encoding or DEFAULT_ENCODING,
        )

    def to_json(self) -> dict:
        if not self.is_complete:
            raise IncompleteSettings("Settings are incomplete, cannot serialize")
        return {
            "secret": self.secret,
            "window": self.window,
            "hash": self.hash.value,
            "encoding": self.encoding.value,
        }

    def __str__(self) -> str:
        def name(value):
            return "undefined" if value is None else value.value

        return (
            f"s: {'****' if self.secret else 'undefined'}; h: {name(self.hash)}; "
            f"w: {self.window if self.window is not None else 'undefined'}; e: {name(self.encoding)}"
        )


def _check_window(window: Any) -> int:
    # bool is an int subclass; JSON true must not become a one-second window
    if isinstance(window, bool) or not isinstance(window, int):
        raise MismatchedType(f"Mismatched window type: {window!r} is not an integer")
    if not 1 <= window <= MAX_WINDOW:
        raise MismatchedType(f"Window out of range: {window} (1..{MAX_WINDOW})")
    return window


def from_input(
    secret: Optional[str],
    window: Optional[int] = None,
    hash_name: Optional[str] = None,
    encoding_name: Optional[str] = None,
) -> TwofaSettings:
    if not secret:
        raise MissingSecret("Secret is needed (-s/--secret)")
    return TwofaSettings(
        secret=secret,
        window=None if window is None else _check_window(window),
        hash=None if hash_name is None else HashAlgorithm.parse(hash_name),
        encoding=None if encoding_name is None else Encoding.parse(encoding_name),
    ).complete()


def from_stored_object(
    data: Optional[Mapping[str, Any]], logger: Optional[Logger] = None
) -> TwofaSettings:
    """
    Rebuild settings from one application's stored JSON object.

    Unknown keys are reported and skipped so older versions can read entries
    written by newer ones.
    """
    if data is None:
        raise NoData("No data for application saved")

    fields: dict = {}
    for key, value in data.items():
        if key == "secret":
            if not isinstance(value, str):
                raise MismatchedType("Mismatched secret stored")
            fields["secret"] = value
        elif key == "window":
            fields["window"] = _check_window(value)
        elif key == "hash":
            fields["hash"] = HashAlgorithm.parse(value)
        elif key == "encoding":
            fields["encoding"] = Encoding.parse(value)
        else:
            if logger is not None:
                logger.norm(f"Value not needed: {key}")
            continue
        if logger is not None:
            logger.max(f"Stored key accepted: {key}")

    return TwofaSettings(**fields).complete()
