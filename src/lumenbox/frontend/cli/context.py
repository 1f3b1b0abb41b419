"""Small helper to build a LumenBox app context for the CLI and the TUI."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

from lumenbox.core.config import FORMAT_SEALED, Settings
from lumenbox.core.exceptions import AuthenticationError
from lumenbox.core.storage import SecretStorage
from lumenbox.core.vault import SecretVault
from lumenbox.wallet import StellarWallet

MNEMONIC_SUFFIX = "-mnemonic"
SECRET_SUFFIX = "-secret"


@dataclass
class AppContext:
    """Container for runtime objects the front ends need."""

    settings: Settings
    vault: SecretVault
    wallet: StellarWallet


def build_context(environ: Optional[Mapping[str, str]] = None) -> AppContext:
    """
    Load settings from the environment and wire storage, vault and wallet.

    ``LUMENBOX_HOME`` selects the storage root and ``LUMENBOX_FORMAT`` the
    container format used for new writes; see :mod:`lumenbox.core.config`.
    """
    settings = Settings.from_env(environ)
    storage = SecretStorage(settings.home)
    vault = SecretVault(storage, container_format=settings.container_format)
    return AppContext(settings=settings, vault=vault, wallet=StellarWallet())


def open_secret(ctx: AppContext, password: str, name: str) -> str:
    """
    Decrypt ``name`` and return the secret as text.

    The front ends only ever store UTF-8 text, so bytes that do not decode are a
    legacy container opened with the wrong password that slipped past the
    padding check. That is reported as :class:`AuthenticationError`.
    """
    data = ctx.vault.load_and_decrypt(password, name)
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise AuthenticationError("Decryption failed: wrong password or corrupted data") from e


def migrate_secret(ctx: AppContext, password: str, name: str) -> bool:
    """
    Rewrite legacy container ``name`` in the sealed format.

    The secret is opened as text first, so a wrong password that slips past the
    legacy padding check cannot replace the container with sealed garbage.
    """
    if ctx.vault.describe(name)["format"] == FORMAT_SEALED:
        return False
    open_secret(ctx, password, name)
    return ctx.vault.migrate(password, name)


def create_wallet(ctx: AppContext, password: str, name: str) -> str:
    """
    Generate a new mnemonic, derive account 0 and store both encrypted.

    The mnemonic goes to ``<name>-mnemonic`` and the account secret key to
    ``<name>-secret``, both under ``password``. Returns the public key.
    """
    mnemonic = ctx.wallet.generate_mnemonic()
    account = ctx.wallet.derive_account(mnemonic)
    ctx.vault.encrypt_and_save(password, mnemonic, name + MNEMONIC_SUFFIX)
    ctx.vault.encrypt_and_save(password, account.secret(0), name + SECRET_SUFFIX)
    return account.public_key(0)
