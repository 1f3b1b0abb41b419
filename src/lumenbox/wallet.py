"""Mnemonic and account derivation for Stellar wallets.

Thin wrapper around ``stellar_sdk.Keypair`` (SEP-0005 derivation). LumenBox only
uses it to obtain the mnemonic and secret key it then encrypts.
"""

from __future__ import annotations

from stellar_sdk import Keypair


class WalletAccount:
    """Accounts derived from one mnemonic, addressed by index."""

    def __init__(self, mnemonic: str, passphrase: str = ""):
        self._mnemonic = mnemonic
        self._passphrase = passphrase

    def keypair(self, index: int = 0) -> Keypair:
        return Keypair.from_mnemonic_phrase(
            self._mnemonic, passphrase=self._passphrase, index=index
        )

    def public_key(self, index: int = 0) -> str:
        return self.keypair(index).public_key

    def secret(self, index: int = 0) -> str:
        return self.keypair(index).secret


class StellarWallet:
    def generate_mnemonic(self, strength: int = 256) -> str:
        # 256 bits of entropy -> 24 words
        return Keypair.generate_mnemonic_phrase(strength=strength)

    def derive_account(self, mnemonic: str, passphrase: str = "") -> WalletAccount:
        return WalletAccount(mnemonic, passphrase=passphrase)
