"""
Secret vault: password-protected containers on top of SecretStorage.

Every container holds exactly one secret (a mnemonic or a private key) under one
password. Two on-disk formats are understood:

- legacy  ``Salted__`` envelopes (see :mod:`lumenbox.security.envelope`),
  readable by files written with the original wallet tool
- sealed  ``LBX2`` containers (see :mod:`lumenbox.security.sealed`)

Reads dispatch on the magic prefix, so both formats can live side by side and a
legacy container can be migrated in place.

Security Note:
    Never log passwords, secrets or key material. Only names and formats.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List

from ..security import envelope, sealed
from ..security.envelope import CodecParams, LEGACY_PARAMS
from ..security.kdf import kdf_params_to_dict
from .config import CONTAINER_FORMATS, FORMAT_LEGACY, FORMAT_SEALED
from .exceptions import FormatError, InvalidInputError
from .storage import SecretStorage

logger = logging.getLogger(__name__)


def detect_format(blob: bytes) -> str:
    """Return the container format of ``blob`` or raise FormatError."""
    if envelope.is_legacy_envelope(blob):
        return FORMAT_LEGACY
    if sealed.is_sealed_container(blob):
        return FORMAT_SEALED
    raise FormatError("Unrecognized container (no known magic prefix)")


class SecretVault:
    """
    Encrypt-and-save / load-and-decrypt for named secrets.

    The vault holds no key material between calls: every operation derives
    its keys from the password it is given and discards them before returning.
    """

    def __init__(
        self,
        storage: SecretStorage,
        container_format: str = FORMAT_LEGACY,
        params: CodecParams = LEGACY_PARAMS,
        time_cost: int = 3,
        memory_cost: int = 65536,
        parallelism: int = 1,
    ):
        if container_format not in CONTAINER_FORMATS:
            raise InvalidInputError(f"Unknown container format {container_format!r}")
        self.storage = storage
        self.container_format = container_format
        self.params = params
        self.time_cost = time_cost
        self.memory_cost = memory_cost
        self.parallelism = parallelism

    # ------------------------------------------------------------------
    # In-memory containers
    # ------------------------------------------------------------------

    def make_container(
        self, password: bytes | str, secret: bytes | str, container_format: str | None = None
    ) -> bytes:
        fmt = container_format or self.container_format
        if fmt == FORMAT_SEALED:
            return sealed.seal(
                password,
                secret,
                time_cost=self.time_cost,
                memory_cost=self.memory_cost,
                parallelism=self.parallelism,
            )
        if fmt == FORMAT_LEGACY:
            return envelope.encrypt(password, secret, params=self.params)
        raise InvalidInputError(f"Unknown container format {fmt!r}")

    def open_container(self, password: bytes | str, blob: bytes) -> bytes:
        fmt = detect_format(blob)
        if fmt == FORMAT_SEALED:
            return sealed.unseal(password, blob)
        return envelope.decrypt(password, blob, params=self.params)

    # ------------------------------------------------------------------
    # Named secrets
    # ------------------------------------------------------------------

    def encrypt_and_save(self, password: bytes | str, secret: bytes | str, name: str) -> Path:
        """
        Encrypt ``secret`` with ``password`` and persist it as ``name.enc``.

        An existing container with the same name is replaced atomically.
        """
        # validate the name before spending time on key derivation
        self.storage.path_for(name)
        blob = self.make_container(password, secret)
        path = self.storage.write(name, blob)
        logger.info("Saved secret %r (%s format)", name, self.container_format)
        return path

    def load_and_decrypt(self, password: bytes | str, name: str) -> bytes:
        """
        Read ``name.enc`` and return the decrypted secret.

        Raises FormatError, AuthenticationError, or the OSError from storage.
        """
        blob = self.storage.read(name)
        try:
            secret = self.open_container(password, blob)
        except FormatError:
            logger.warning("Container %r is not a recognized format", name)
            raise
        logger.info("Opened secret %r (%s format)", name, detect_format(blob))
        return secret

    def migrate(self, password: bytes | str, name: str) -> bool:
        """
        Rewrite a legacy container as a sealed one.

        Returns False when the container is already sealed.
        """
        blob = self.storage.read(name)
        if detect_format(blob) == FORMAT_SEALED:
            return False
        secret = bytearray(envelope.decrypt(password, blob, params=self.params))
        try:
            self.storage.write(name, self.make_container(password, bytes(secret), FORMAT_SEALED))
        finally:
            for i in range(len(secret)):
                secret[i] = 0
        logger.info("Migrated secret %r from legacy to sealed format", name)
        return True

    def describe(self, name: str) -> Dict[str, Any]:
        """Header facts about ``name.enc``. Needs no password and reveals no secret."""
        blob = self.storage.read(name)
        fmt = detect_format(blob)
        if fmt == FORMAT_SEALED:
            header = sealed.read_header(blob)
            kdf = kdf_params_to_dict(
                "argon2id",
                header.salt,
                time=header.time_cost,
                memory=header.memory_cost,
                parallelism=header.parallelism,
            )
            header_len = len(header.raw)
        else:
            kdf = kdf_params_to_dict(
                f"openssl-{self.params.hash_name}",
                envelope.read_salt(blob),
                key_size=self.params.key_size,
                iv_size=self.params.iv_size,
            )
            header_len = envelope.HEADER_SIZE
        return {
            "name": name,
            "format": fmt,
            "size": len(blob),
            "ciphertext_bytes": len(blob) - header_len,
            "kdf": kdf,
        }

    def list_secrets(self) -> List[str]:
        return self.storage.list_names()

    def has_secret(self, name: str) -> bool:
        return self.storage.exists(name)

    def delete_secret(self, name: str) -> None:
        self.storage.delete(name)
        logger.info("Deleted secret %r", name)
