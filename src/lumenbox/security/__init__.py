"""Security helpers: key derivation and container codecs for LumenBox.

This package provides:
- the legacy "bytes to key" derivation and the ``Salted__`` envelope codec,
  kept byte-compatible with files written by the original wallet tool
- an Argon2id + AES-GCM sealed container for new writers
"""

from .kdf import (
    DerivedKeyMaterial,
    generate_salt,
    openssl_derive_bytes,
    derive_key_material,
    derive_sealing_key,
    to_bytes,
)
from .envelope import (
    CodecParams,
    LEGACY_PARAMS,
    OPENSSL_AES_256_PARAMS,
    encrypt,
    decrypt,
    is_legacy_envelope,
)
from .sealed import seal, unseal, is_sealed_container

__all__ = [
    "DerivedKeyMaterial",
    "generate_salt",
    "openssl_derive_bytes",
    "derive_key_material",
    "derive_sealing_key",
    "to_bytes",
    "CodecParams",
    "LEGACY_PARAMS",
    "OPENSSL_AES_256_PARAMS",
    "encrypt",
    "decrypt",
    "is_legacy_envelope",
    "seal",
    "unseal",
    "is_sealed_container",
]
