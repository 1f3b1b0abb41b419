"""Legacy ``Salted__`` envelope codec.

Layout:
- 8 bytes: magic b'Salted__'
- 8 bytes: salt
- N bytes: CBC ciphertext, PKCS#7 padded (N is a positive multiple of the block size)

Key and IV come from ``openssl_derive_bytes`` over (password, salt). The format has
no MAC: a wrong password is only caught by the padding check, so about one wrong
password in 256 decrypts to garbage instead of failing. New writers should prefer
:mod:`lumenbox.security.sealed`.
"""
from dataclasses import dataclass

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from ..core.exceptions import AuthenticationError, FormatError, InvalidInputError
from .kdf import DIGESTS, LEGACY_SALT_SIZE, derive_key_material, generate_salt, to_bytes

MAGIC = b"Salted__"
HEADER_SIZE = len(MAGIC) + LEGACY_SALT_SIZE

_CIPHERS = {"aes": algorithms.AES}
_MODES = {"cbc": modes.CBC}


@dataclass(frozen=True)
class CodecParams:
    """Algorithm selection for one envelope flavour."""

    hash_name: str = "md5"
    cipher_name: str = "aes"
    mode_name: str = "cbc"
    key_size: int = 24
    iv_size: int = 8
    salt_size: int = LEGACY_SALT_SIZE

    def __post_init__(self):
        if self.hash_name.lower() not in DIGESTS:
            raise InvalidInputError(f"Unsupported digest: {self.hash_name!r}")
        if self.cipher_name.lower() not in _CIPHERS:
            raise InvalidInputError(f"Unsupported cipher: {self.cipher_name!r}")
        if self.mode_name.lower() not in _MODES:
            raise InvalidInputError(f"Unsupported mode: {self.mode_name!r}")
        if self.key_size * 8 not in self.cipher_cls.key_sizes:
            raise InvalidInputError(f"Invalid key size for {self.cipher_name}: {self.key_size}")
        if not 0 < self.iv_size <= self.block_size:
            raise InvalidInputError(f"IV size must be between 1 and {self.block_size}")
        if self.salt_size != LEGACY_SALT_SIZE:
            # the header has a fixed 8-byte salt slot
            raise InvalidInputError(f"Salt size must be {LEGACY_SALT_SIZE}")

    @property
    def cipher_cls(self):
        return _CIPHERS[self.cipher_name.lower()]

    @property
    def block_size(self) -> int:
        return self.cipher_cls.block_size // 8

    def build_cipher(self, key: bytes, iv: bytes) -> Cipher:
        # a short IV is zero-extended to a full block, matching the original writer
        full_iv = iv.ljust(self.block_size, b"\x00")
        return Cipher(self.cipher_cls(key), _MODES[self.mode_name.lower()](full_iv))


# 24-byte key, 8-byte IV: the files written by the original wallet program
LEGACY_PARAMS = CodecParams()

# what `openssl enc -aes-256-cbc -md md5` reads and writes
OPENSSL_AES_256_PARAMS = CodecParams(key_size=32, iv_size=16)


def is_legacy_envelope(blob: bytes) -> bool:
    return blob[: len(MAGIC)] == MAGIC


def read_salt(envelope: bytes) -> bytes:
    """Validate the 16-byte header and return the embedded salt."""
    if len(envelope) < HEADER_SIZE:
        raise FormatError(f"Container too short: {len(envelope)} bytes (minimum {HEADER_SIZE})")
    if not is_legacy_envelope(envelope):
        raise FormatError("Invalid container format (magic mismatch)")
    return bytes(envelope[len(MAGIC):HEADER_SIZE])


def encrypt(
    password: bytes | str, plaintext: bytes | str, params: CodecParams = LEGACY_PARAMS
) -> bytes:
    """Encrypt ``plaintext`` under ``password`` and return ``MAGIC || salt || ciphertext``."""
    salt = generate_salt(params.salt_size)
    padder = padding.PKCS7(params.cipher_cls.block_size).padder()
    padded = padder.update(to_bytes(plaintext)) + padder.finalize()

    with derive_key_material(
        password,
        salt,
        key_size=params.key_size,
        iv_size=params.iv_size,
        hash_name=params.hash_name,
        salt_size=params.salt_size,
    ) as material:
        encryptor = params.build_cipher(bytes(material.key), bytes(material.iv)).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()

    return MAGIC + salt + ciphertext


def decrypt(
    password: bytes | str, envelope: bytes, params: CodecParams = LEGACY_PARAMS
) -> bytes:
    """
    Recover the plaintext from a ``Salted__`` envelope.

    Raises FormatError for a foreign or truncated container and AuthenticationError
    when the padding check fails (usually a wrong password).
    """
    salt = read_salt(envelope)
    ciphertext = bytes(envelope[HEADER_SIZE:])
    if not ciphertext or len(ciphertext) % params.block_size:
        raise FormatError(
            f"Ciphertext length {len(ciphertext)} is not a positive multiple of {params.block_size}"
        )

    with derive_key_material(
        password,
        salt,
        key_size=params.key_size,
        iv_size=params.iv_size,
        hash_name=params.hash_name,
        salt_size=params.salt_size,
    ) as material:
        decryptor = params.build_cipher(bytes(material.key), bytes(material.iv)).decryptor()
        padded = bytearray(decryptor.update(ciphertext) + decryptor.finalize())

    try:
        unpadder = padding.PKCS7(params.cipher_cls.block_size).unpadder()
        return unpadder.update(bytes(padded)) + unpadder.finalize()
    except ValueError as e:
        raise AuthenticationError("Decryption failed: wrong password or corrupted data") from e
    finally:
        for i in range(len(padded)):
            padded[i] = 0
