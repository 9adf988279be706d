import os
from pathlib import Path

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

from .storage import ensure_600

MAGIC = b"TWOFA1"      # format marker
SALT_LEN = 16
NONCE_LEN = 12         # AESGCM nonce length
TAG_LEN = 16

SCRYPT_N = 2**14
SCRYPT_R = 8
SCRYPT_P = 1


class CipherError(Exception):
    pass


class CipherIOError(CipherError):
    pass


def derive_key(password: str, salt: bytes) -> bytes:
    kdf = Scrypt(salt=salt, length=32, n=SCRYPT_N, r=SCRYPT_R, p=SCRYPT_P)
    return kdf.derive(password.encode("utf-8"))


def encrypt_bytes(password: str, plaintext: bytes) -> bytes:
    salt = os.urandom(SALT_LEN)
    nonce = os.urandom(NONCE_LEN)
    aesgcm = AESGCM(derive_key(password, salt))
    ct = aesgcm.encrypt(nonce, plaintext, associated_data=MAGIC)
    return MAGIC + salt + nonce + ct


def decrypt_bytes(password: str, blob: bytes) -> bytes:
    header = len(MAGIC) + SALT_LEN + NONCE_LEN
    if len(blob) < header + TAG_LEN:
        raise CipherError("Encrypted file is too short / corrupted.")
    if not blob.startswith(MAGIC):
        raise CipherError("Encrypted file has unknown format (bad magic).")

    salt = blob[len(MAGIC): len(MAGIC) + SALT_LEN]
    nonce = blob[len(MAGIC) + SALT_LEN: header]
    aesgcm = AESGCM(derive_key(password, salt))

    try:
        return aesgcm.decrypt(nonce, blob[header:], associated_data=MAGIC)
    except InvalidTag as e:
        raise CipherError("Decryption failed (wrong password? corrupted file?).") from e


def encrypt_file(plain_path: Path, cipher_path: Path, password: str) -> None:
    """Encrypt PLAIN_PATH into CIPHER_PATH, replacing any previous store."""
    try:
        plaintext = plain_path.read_bytes()
    except OSError as e:
        raise CipherIOError(f"Failed to read {plain_path}: {e}") from e

    blob = encrypt_bytes(password, plaintext)

    # temp then replace, so a failed write never truncates the old store
    tmp = cipher_path.with_name(cipher_path.name + ".tmp")
    try:
        tmp.write_bytes(blob)
        ensure_600(tmp)
        tmp.replace(cipher_path)
    except OSError as e:
        raise CipherIOError(f"Failed to write {cipher_path}: {e}") from e


def decrypt_file(cipher_path: Path, plain_path: Path, password: str) -> None:
    """Decrypt CIPHER_PATH into PLAIN_PATH. Nothing is written unless authentication succeeds."""
    try:
        blob = cipher_path.read_bytes()
    except OSError as e:
        raise CipherIOError(f"Failed to read {cipher_path}: {e}") from e

    plaintext = decrypt_bytes(password, blob)

    try:
        plain_path.touch(mode=0o600, exist_ok=True)
        plain_path.write_bytes(plaintext)
    except OSError as e:
        raise CipherIOError(f"Failed to write {plain_path}: {e}") from e
    ensure_600(plain_path)
