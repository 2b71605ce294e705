"""AliasKeyManager — secp256k1 alias key generation and derivation.

A thin wrapper around ``eth_account``. Private keys are handled as
``0x``-prefixed hex strings so they can be stored in the alias store
verbatim; the alias address is always derived from the key and never
stored next to it.
"""
from __future__ import annotations

from eth_account import Account
from eth_account.signers.local import LocalAccount


class AliasKeyManager:
    """Generate alias keypairs and derive signing identities from stored keys.

    Example
    -------
    ::

        manager = AliasKeyManager()
        account = manager.generate()
        private_key = manager.export_key(account)
        assert manager.derive(private_key).address == account.address
    """

    def generate(self) -> LocalAccount:
        """Create a fresh random alias account."""
        return Account.create()

    def derive(self, private_key: str) -> LocalAccount:
        """Rebuild the signing identity for a stored private key.

        Parameters
        ----------
        private_key:
            Hex-encoded private key, with or without the ``0x`` prefix.

        Returns
        -------
        LocalAccount
            Account whose ``address`` is the checksummed alias address.
        """
        return Account.from_key(private_key)

    def export_key(self, account: LocalAccount) -> str:
        """Return the account's private key as a ``0x``-prefixed hex string."""
        return "0x" + bytes(account.key).hex()

    def address_of(self, private_key: str) -> str:
        """Return the checksummed address belonging to *private_key*."""
        return self.derive(private_key).address


__all__ = ["AliasKeyManager"]
