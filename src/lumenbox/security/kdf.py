"""Key derivation for LumenBox containers.

Two derivations live here:

- ``openssl_derive_bytes``: the legacy "bytes to key" chain used by ``Salted__``
  files. It must stay byte-compatible with files written by older tools.
- ``derive_sealing_key``: Argon2id, used by the versioned sealed container.
"""
import os
from dataclasses import dataclass
from typing import Dict

from argon2.low_level import Type, hash_secret_raw
from cryptography.hazmat.primitives import hashes

from ..core.exceptions import InvalidInputError

LEGACY_SALT_SIZE = 8

DIGESTS = {
    "md5": hashes.MD5,
    "sha1": hashes.SHA1,
    "sha256": hashes.SHA256,
}


def generate_salt(length: int = LEGACY_SALT_SIZE) -> bytes:
    """Return a cryptographically secure random salt."""
    return os.urandom(length)


def to_bytes(value: bytes | str) -> bytes:
    """Passwords and plaintexts given as str are encoded as UTF-8."""
    if isinstance(value, str):
        return value.encode("utf-8")
    return bytes(value)


def _digest_for(hash_name: str) -> hashes.HashAlgorithm:
    try:
        return DIGESTS[hash_name.lower()]()
    except KeyError:
        raise InvalidInputError(f"Unsupported digest: {hash_name!r}") from None


def openssl_derive_bytes(
    password: bytes | str,
    salt: bytes,
    output_length: int,
    hash_name: str = "md5",
    salt_size: int = LEGACY_SALT_SIZE,
) -> bytes:
    """
    Derive ``output_length`` bytes from a password and salt.

    block[0] = H(password || salt)
    block[i] = H(block[i-1] || password || salt)

    The blocks are concatenated and truncated. An empty password is accepted.
    """
    if salt is None or len(salt) != salt_size:
        raise InvalidInputError(f"Salt must be exactly {salt_size} bytes")
    if output_length <= 0:
        raise InvalidInputError("Output length must be positive")

    secret = to_bytes(password)
    out = bytearray()
    block = b""
    while len(out) < output_length:
        h = hashes.Hash(_digest_for(hash_name))
        h.update(block)
        h.update(secret)
        h.update(salt)
        block = h.finalize()
        out += block
    return bytes(out[:output_length])


@dataclass
class DerivedKeyMaterial:
    """Cipher key and IV derived from one (password, salt) pair.

    Use as a context manager so both buffers are zeroed when the block exits.
    """

    key: bytearray
    iv: bytearray

    def wipe(self) -> None:
        for buf in (self.key, self.iv):
            for i in range(len(buf)):
                buf[i] = 0

    def __enter__(self) -> "DerivedKeyMaterial":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.wipe()


def derive_key_material(
    password: bytes | str,
    salt: bytes,
    key_size: int = 24,
    iv_size: int = 8,
    hash_name: str = "md5",
    salt_size: int = LEGACY_SALT_SIZE,
) -> DerivedKeyMaterial:
    """Derive ``key_size + iv_size`` bytes and split them into key and IV."""
    if key_size <= 0 or iv_size < 0:
        raise InvalidInputError("Key size must be positive and IV size non-negative")
    raw = bytearray(
        openssl_derive_bytes(
            password, salt, key_size + iv_size, hash_name=hash_name, salt_size=salt_size
        )
    )
    try:
        return DerivedKeyMaterial(
            key=bytearray(raw[:key_size]),
            iv=bytearray(raw[key_size:key_size + iv_size]),
        )
    finally:
        for i in range(len(raw)):
            raw[i] = 0


def derive_sealing_key(
    password: bytes | str,
    salt: bytes,
    time_cost: int = 3,
    memory_cost: int = 65536,
    parallelism: int = 1,
    key_len: int = 32,
) -> bytes:
    """
    Derive a container key from a password using Argon2id.
    Returns raw derived key bytes.
    """
    return hash_secret_raw(
        secret=to_bytes(password),
        salt=salt,
        time_cost=time_cost,
        memory_cost=memory_cost,
        parallelism=parallelism,
        hash_len=key_len,
        type=Type.ID,
    )


def kdf_params_to_dict(algo: str, salt: bytes, **params) -> Dict:
    return {"algo": algo, "salt": salt.hex(), **params}
