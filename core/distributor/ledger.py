"""
In-process ledger.

Holds token accounts and distributor records and provides the two guarantees
the claim protocol relies on:

- Single-writer per distributor: ``lock_for(address)`` returns one lock per
  distributor. The verify/check/set/transfer sequence runs under it, so two
  claims against the same distributor are never applied concurrently.
  Distinct distributors use distinct locks and proceed in parallel.
- Atomic commit: ``commit_claim`` writes the new record and both token
  balances together or not at all.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, replace

from solders.pubkey import Pubkey

from core.crypto.keys import derive_associated_token_address
from core.distributor.state import DistributorRecord
from core.schemas.errors import (
    AccountNotFoundException,
    InsufficientVaultBalanceException,
    MalformedInputException,
    MintMismatchException,
    VaultAuthorityMismatchException,
)


logger = logging.getLogger(__name__)

U64_MAX = 2**64 - 1


@dataclass(frozen=True)
class TokenAccount:
    """A token account: balance of one mint held for one owner."""
    address: Pubkey
    mint: Pubkey
    owner: Pubkey
    amount: int = 0


class Ledger:
    """Token accounts plus distributor records, with per-distributor locks."""

    def __init__(self) -> None:
        self._token_accounts: dict[Pubkey, TokenAccount] = {}
        self._distributors: dict[Pubkey, DistributorRecord] = {}
        self._locks: dict[Pubkey, threading.Lock] = {}
        # Guards the account maps themselves; held only for short writes
        self._state_lock = threading.RLock()

    # ------------------------------------------------------------------
    # Token accounts
    # ------------------------------------------------------------------

    def create_token_account(
        self,
        owner: Pubkey,
        mint: Pubkey,
        address: Pubkey | None = None,
    ) -> Pubkey:
        """
        Create an empty token account (the associated address by default).

        Creating an account that already exists with the same owner and mint
        is a no-op.
        """
        address = address or derive_associated_token_address(owner, mint)
        with self._state_lock:
            existing = self._token_accounts.get(address)
            if existing is not None:
                if existing.owner != owner or existing.mint != mint:
                    raise MalformedInputException(
                        f"Token account {address} already exists with a different owner or mint",
                        field_path="address",
                    )
                return address
            self._token_accounts[address] = TokenAccount(address=address, mint=mint, owner=owner)
        logger.debug(f"Created token account {address} owner={owner} mint={mint}")
        return address

    def has_token_account(self, address: Pubkey) -> bool:
        with self._state_lock:
            return address in self._token_accounts

    def get_token_account(self, address: Pubkey) -> TokenAccount:
        with self._state_lock:
            account = self._token_accounts.get(address)
        if account is None:
            raise AccountNotFoundException(str(address), kind="token account")
        return account

    def balance(self, address: Pubkey) -> int:
        return self.get_token_account(address).amount

    def mint_to(self, address: Pubkey, amount: int) -> int:
        """Credit ``amount`` to a token account (funding collaborator)."""
        if amount < 0:
            raise MalformedInputException("Mint amount must be non-negative", field_path="amount")
        with self._state_lock:
            account = self.get_token_account(address)
            if account.amount + amount > U64_MAX:
                raise MalformedInputException("Token balance would overflow u64", field_path="amount")
            self._token_accounts[address] = replace(account, amount=account.amount + amount)
            return account.amount + amount

    # ------------------------------------------------------------------
    # Distributor records
    # ------------------------------------------------------------------

    def create_distributor(self, address: Pubkey, record: DistributorRecord) -> None:
        with self._state_lock:
            if address in self._distributors:
                raise MalformedInputException(
                    f"Distributor {address} already exists",
                    field_path="address",
                )
            self._distributors[address] = record
            self._locks[address] = threading.Lock()

    def get_distributor(self, address: Pubkey) -> DistributorRecord:
        with self._state_lock:
            record = self._distributors.get(address)
        if record is None:
            raise AccountNotFoundException(str(address), kind="distributor")
        return record

    def all_distributors(self) -> list[tuple[Pubkey, DistributorRecord]]:
        with self._state_lock:
            return list(self._distributors.items())

    def lock_for(self, address: Pubkey) -> threading.Lock:
        """Single-writer lock for one distributor."""
        with self._state_lock:
            lock = self._locks.get(address)
        if lock is None:
            raise AccountNotFoundException(str(address), kind="distributor")
        return lock

    # ------------------------------------------------------------------
    # Atomic claim commit
    # ------------------------------------------------------------------

    def commit_claim(
        self,
        address: Pubkey,
        record: DistributorRecord,
        destination: Pubkey,
        amount: int,
    ) -> None:
        """
        Store ``record`` and move ``amount`` from its vault to ``destination``.

        Every check runs before the first write, so on any exception the
        ledger is unchanged.

        Raises:
            InsufficientVaultBalanceException: Vault holds less than amount
            MintMismatchException: Destination holds a different mint
            VaultAuthorityMismatchException: Vault not owned by the record's authority
        """
        with self._state_lock:
            vault = self.get_token_account(record.vault)
            dest = self.get_token_account(destination)

            if vault.owner != record.authority:
                raise VaultAuthorityMismatchException(
                    expected=str(record.authority), actual=str(vault.owner)
                )
            if dest.mint != vault.mint:
                raise MintMismatchException(expected=str(vault.mint), actual=str(dest.mint))
            if vault.amount < amount:
                raise InsufficientVaultBalanceException(required=amount, available=vault.amount)
            if dest.amount + amount > U64_MAX:
                raise MalformedInputException("Token balance would overflow u64", field_path="amount")

            self._distributors[address] = record
            self._token_accounts[vault.address] = replace(vault, amount=vault.amount - amount)
            # Re-read in case destination is the vault itself
            dest = self._token_accounts[destination]
            self._token_accounts[destination] = replace(dest, amount=dest.amount + amount)


def format_amount(amount: int, decimals: int = 9) -> str:
    """Base units to a two-decimal display string (half-up, integer math)."""
    if decimals <= 2:
        cents = amount * 10 ** (2 - decimals)
    else:
        step = 10 ** (decimals - 2)
        cents, rest = divmod(amount, step)
        if rest * 2 >= step:
            cents += 1
    whole, frac = divmod(cents, 100)
    return f"{whole}.{frac:02d}"


__all__ = [
    "TokenAccount",
    "Ledger",
    "format_amount",
]
