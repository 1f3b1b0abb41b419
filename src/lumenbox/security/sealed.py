"""Versioned, authenticated container with compact binary header.

Header layout (binary, all big-endian):
- 4 bytes: magic b'LBX2'
- 1 byte: version (2)
- 1 byte: alg_id (1 = AES-256-GCM)
- 1 byte: kdf_id (1 = Argon2id)
- 1 byte: Argon2 time cost
- 4 bytes: Argon2 memory cost in KiB (unsigned int)
- 1 byte: Argon2 parallelism
- 1 byte: len_salt (S)
- S bytes: salt
- 12 bytes: nonce

Body: AES-GCM ciphertext followed by its 16-byte tag. The header is passed as
associated data, so tampering with KDF parameters or salt fails authentication.
"""
import os
import struct
from dataclasses import dataclass

from argon2.exceptions import HashingError
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..core.exceptions import AuthenticationError, FormatError
from .kdf import derive_sealing_key, generate_salt, to_bytes

MAGIC = b"LBX2"
VERSION = 2
ALG_ID_AESGCM = 1
KDF_ID_ARGON2ID = 1

SALT_SIZE = 16
NONCE_SIZE = 12
TAG_SIZE = 16
# 2 GiB; a corrupted header must not make unseal allocate without bound
MAX_MEMORY_COST = 1 << 21

_FIXED = struct.Struct(">4sBBBBIBB")


def is_sealed_container(blob: bytes) -> bool:
    return blob[: len(MAGIC)] == MAGIC


def _build_header(salt: bytes, nonce: bytes, time_cost: int, memory_cost: int, parallelism: int) -> bytes:
    header = bytearray()
    header += _FIXED.pack(
        MAGIC,
        VERSION,
        ALG_ID_AESGCM,
        KDF_ID_ARGON2ID,
        time_cost,
        memory_cost,
        parallelism,
        len(salt),
    )
    header += salt
    header += nonce
    return bytes(header)


def seal(
    password: bytes | str,
    plaintext: bytes | str,
    time_cost: int = 3,
    memory_cost: int = 65536,
    parallelism: int = 1,
) -> bytes:
    """Encrypt ``plaintext`` into a sealed container."""
    salt = generate_salt(SALT_SIZE)
    nonce = os.urandom(NONCE_SIZE)
    header = _build_header(salt, nonce, time_cost, memory_cost, parallelism)

    key = bytearray(
        derive_sealing_key(
            password,
            salt,
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
        )
    )
    try:
        ct = AESGCM(bytes(key)).encrypt(nonce, to_bytes(plaintext), header)
    finally:
        for i in range(len(key)):
            key[i] = 0
    return header + ct


@dataclass(frozen=True)
class SealedHeader:
    time_cost: int
    memory_cost: int
    parallelism: int
    salt: bytes
    nonce: bytes
    raw: bytes


def read_header(blob: bytes) -> SealedHeader:
    """Parse and validate the header; raises FormatError on anything unexpected."""
    if len(blob) < _FIXED.size:
        raise FormatError(f"Container too short: {len(blob)} bytes")
    magic, ver, alg, kdf_id, time_cost, memory_cost, parallelism, salt_len = _FIXED.unpack_from(blob)
    if magic != MAGIC:
        raise FormatError("Invalid container format (magic mismatch)")
    if ver != VERSION:
        raise FormatError(f"Unsupported container version: {ver}")
    if alg != ALG_ID_AESGCM:
        raise FormatError(f"Unsupported algorithm id: {alg}")
    if kdf_id != KDF_ID_ARGON2ID:
        raise FormatError(f"Unsupported KDF id: {kdf_id}")
    if memory_cost > MAX_MEMORY_COST:
        raise FormatError(f"KDF memory cost too large: {memory_cost} KiB")

    header_len = _FIXED.size + salt_len + NONCE_SIZE
    if len(blob) < header_len + TAG_SIZE:
        raise FormatError("Container truncated")
    return SealedHeader(
        time_cost=time_cost,
        memory_cost=memory_cost,
        parallelism=parallelism,
        salt=bytes(blob[_FIXED.size:_FIXED.size + salt_len]),
        nonce=bytes(blob[_FIXED.size + salt_len:header_len]),
        raw=bytes(blob[:header_len]),
    )


def unseal(password: bytes | str, blob: bytes) -> bytes:
    """
    Decrypt a sealed container.

    Raises FormatError for a truncated or unsupported header and AuthenticationError
    when the GCM tag does not verify.
    """
    header = read_header(blob)
    ct = bytes(blob[len(header.raw):])

    try:
        key = bytearray(
            derive_sealing_key(
                password,
                header.salt,
                time_cost=header.time_cost,
                memory_cost=header.memory_cost,
                parallelism=header.parallelism,
            )
        )
    except HashingError as e:
        raise FormatError(f"Invalid KDF parameters in header: {e}") from e

    try:
        return AESGCM(bytes(key)).decrypt(header.nonce, ct, header.raw)
    except InvalidTag as e:
        raise AuthenticationError("Decryption failed: wrong password or corrupted data") from e
    finally:
        for i in range(len(key)):
            key[i] = 0
