"""
Encrypted storage transactions.

The plaintext document only exists on disk between decryption and the final
cleanup of a single transaction:

    decrypt -> body (read / merge / write) -> encrypt -> delete plaintext

The plaintext is deleted on every exit path once it may have been produced,
including failures and declined prompts.
"""
from pathlib import Path
from typing import Any, Callable, Optional, TypeVar

import click

from . import crypto, otp
from .document import EMPTY_DOCUMENT, dump_document, merge, parse_document
from .errors import (
    ApplicationNotFound,
    Declined,
    DecryptionFailed,
    DeleteError,
    EncryptionFailed,
    NoFile,
    StorageInconsistent,
)
from .log import Logger
from .settings import from_input, from_stored_object
from .storage import Overwrite, StoragePaths, delete, ensure_directory, read, write

T = TypeVar("T")

Cipher = Callable[[Path, Path, str], None]


def confirm_overwrite(question: str) -> bool:
    # only a literal "y" counts; "Y", "yes" and end of input decline
    try:
        answer = click.prompt(f"{question} [y/N]", default="", show_default=False)
    except click.Abort:
        return False
    return answer == "y"


class Transaction:
    def __init__(
        self,
        paths: StoragePaths,
        password: str,
        logger: Optional[Logger] = None,
        *,
        decrypt: Cipher = crypto.decrypt_file,
        encrypt: Cipher = crypto.encrypt_file,
        generate_code: Callable[..., str] = otp.generate_code,
        confirm: Callable[[str], bool] = confirm_overwrite,
    ) -> None:
        self.paths = paths
        self.password = password
        self.logger = logger or Logger()
        self._decrypt_file = decrypt
        self._encrypt_file = encrypt
        self._generate_code = generate_code
        self._confirm = confirm

    # actions

    def init(self) -> None:
        """Create an empty encrypted storage, asking before replacing an existing one."""
        ensure_directory(self.paths.directory)

        overwrite = Overwrite.REQUIRE_ABSENT
        if self.paths.encrypted_file.exists():
            if not self._confirm("Storage already exist. Overwrite ?"):
                raise Declined("Stopping action")
            overwrite = Overwrite.FORCE
        elif self.paths.plaintext_file.exists():
            # left behind by an interrupted run; there is no store it could belong to
            self.logger.norm(f"Removing stale plaintext file '{self.paths.plaintext_file}'")
            delete(self.paths.plaintext_file)

        try:
            write(self.paths.plaintext_file, EMPTY_DOCUMENT, overwrite)
            self.logger.min(f"File '{self.paths.plaintext_file}' created")
            self._encrypt()
        finally:
            self._discard()

    def set(
        self,
        application: str,
        secret: Optional[str],
        window: Optional[int] = None,
        hash_name: Optional[str] = None,
        encoding_name: Optional[str] = None,
    ) -> None:
        def body() -> None:
            document = self._load_document()
            settings = from_input(secret, window, hash_name, encoding_name)
            self.logger.min(f"Created settings: {settings}")

            if isinstance(document, dict) and application in document:
                if not self._confirm(f"Application '{application}' already exists. Overwrite ?"):
                    raise Declined("Stopping action")

            document = merge(document, {application: settings.to_json()})
            self.logger.mid(f"Merged applications: {sorted(document)}")
            write(self.paths.plaintext_file, dump_document(document), Overwrite.FORCE)

        self._run(body)

    def get(self, application: str) -> str:
        """Print and return the current code for APPLICATION."""
        def body() -> str:
            document = self._load_document()
            data = document.get(application) if isinstance(document, dict) else None
            if not isinstance(data, dict):
                raise ApplicationNotFound("Application does not exist. Exiting.")

            settings = from_stored_object(data, self.logger)
            self.logger.min(f"Created settings: {settings}")

            code = self._generate_code(settings.secret, settings.encoding, settings.hash, settings.window)
            click.echo(f"Code: {code}")
            return code

        return self._run(body)

    # phases

    def _run(self, body: Callable[[], T]) -> T:
        # no cleanup when decryption fails: no plaintext was produced
        self._decrypt()
        try:
            result = body()
            self._encrypt()
            return result
        finally:
            self._discard()

    def _decrypt(self) -> None:
        self.logger.min(f"Decrypt '{self.paths.encrypted_file}' to '{self.paths.plaintext_file}'")
        try:
            self._decrypt_file(self.paths.encrypted_file, self.paths.plaintext_file, self.password)
        except crypto.CipherIOError as e:
            raise DecryptionFailed(f"Could not decrypt file (run `twofa init` first?): {e}") from e
        except crypto.CipherError as e:
            raise DecryptionFailed(f"Could not decrypt file: {e}") from e

    def _encrypt(self) -> None:
        self.logger.min(f"Encrypting '{self.paths.plaintext_file}' to '{self.paths.encrypted_file}'")
        try:
            self._encrypt_file(self.paths.plaintext_file, self.paths.encrypted_file, self.password)
        except crypto.CipherError as e:
            raise EncryptionFailed(f"Could not encrypt file: {e}") from e

    def _discard(self) -> None:
        # never raises: a cleanup problem must not hide the primary failure
        try:
            delete(self.paths.plaintext_file)
        except DeleteError as e:
            self.logger.norm(f"Warning: {e}")
        else:
            self.logger.min(f"File '{self.paths.plaintext_file}' deleted")

    def _load_document(self) -> Any:
        try:
            text = read(self.paths.plaintext_file)
        except NoFile as e:
            if self.paths.encrypted_file.exists():
                raise StorageInconsistent(
                    f"Encrypted storage {self.paths.encrypted_file} exists but produced no plaintext"
                ) from e
            self.logger.min("No storage found, starting from an empty document")
            text = EMPTY_DOCUMENT

        document = parse_document(text)
        if isinstance(document, dict):
            self.logger.mid(f"Applications in storage: {sorted(document)}")
        return document
