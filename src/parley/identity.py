"""Signing identity and address canonicalization."""

from __future__ import annotations

from dataclasses import dataclass

from eth_account import Account
from eth_account.signers.local import LocalAccount
from eth_utils import is_address, to_checksum_address
from loguru import logger

from parley.errors import ConfigError


@dataclass(frozen=True)
class Identity:
    """The account Parley reads and writes messages as."""

    account: LocalAccount
    ephemeral: bool = False

    @property
    def address(self) -> str:
        return canonical_address(self.account.address)


def canonical_address(address: str) -> str:
    """Return the checksummed form of ``address`` so textual case never matters."""

    if not isinstance(address, str) or not is_address(address):
        raise ValueError(f"not an account address: {address!r}")
    return to_checksum_address(address)


def same_address(left: str, right: str) -> bool:
    return canonical_address(left) == canonical_address(right)


def resolve_identity(key: str | None) -> Identity:
    """Load the identity for ``key`` or generate an ephemeral one when no key is configured."""

    if not key:
        account = Account.create()
        logger.warning(
            "identity.ephemeral address={} conversations will not survive a restart",
            account.address,
        )
        return Identity(account=account, ephemeral=True)
    try:
        account = Account.from_key(key)
    except Exception as exc:
        raise ConfigError("configured key is not a valid private key") from exc
    return Identity(account=account)
