"""
Address Parsing and Key Derivation

Addresses are 32-byte public keys. They are accepted as base58 strings,
0x-prefixed hex, raw bytes, or solders Pubkey objects, and always
normalised to a Pubkey before use.

Derivation rules (documented seed bytes):
- Vault authority: find_program_address([b"distributor", merkle_root], program_id)
- Associated token account: find_program_address(
      [owner, TOKEN_PROGRAM_ID, mint], ASSOCIATED_TOKEN_PROGRAM_ID)

The authority has no private key; only the distribution program can sign
for it, so it is the only actor able to move funds out of the vault.
"""
from __future__ import annotations

from solders.keypair import Keypair
from solders.pubkey import Pubkey

from core.crypto.hashing import HASH_SIZE, from_hex
from core.schemas.errors import InvalidMerkleRootException, MalformedInputException


DEFAULT_PROGRAM_ID = Pubkey.from_string("5zp47zmoPwVa55PXtP5kr7URsNRMUqnhiPLLnyo5M9AQ")
TOKEN_PROGRAM_ID = Pubkey.from_string("TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA")
ASSOCIATED_TOKEN_PROGRAM_ID = Pubkey.from_string("ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL")
SYSTEM_PROGRAM_ID = Pubkey.from_string("11111111111111111111111111111111")
RENT_SYSVAR_ID = Pubkey.from_string("SysvarRent111111111111111111111111111111111")

AUTHORITY_SEED = b"distributor"

AddressLike = str | bytes | Pubkey


def parse_address(value: AddressLike, field_path: str = "address") -> Pubkey:
    """
    Normalise an address-like value to a Pubkey.

    Args:
        value: base58 string, 0x-hex string, 32 raw bytes, or Pubkey
        field_path: Name reported in the error details

    Raises:
        MalformedInputException: If the value is not a canonical 32-byte key
    """
    if isinstance(value, Pubkey):
        return value

    if isinstance(value, bytes):
        if len(value) != HASH_SIZE:
            raise MalformedInputException(
                f"Address must be {HASH_SIZE} bytes, got {len(value)}",
                field_path=field_path,
            )
        return Pubkey.from_bytes(value)

    if isinstance(value, str):
        text = value.strip()
        if text.startswith("0x"):
            try:
                raw = from_hex(text)
            except ValueError as e:
                raise MalformedInputException(str(e), field_path=field_path) from e
            return parse_address(raw, field_path)
        try:
            pubkey = Pubkey.from_string(text)
        except ValueError as e:
            raise MalformedInputException(
                f"Invalid base58 address {text!r}: {e}",
                field_path=field_path,
            ) from e
        # Reject non-canonical encodings (e.g. extra leading '1's)
        if str(pubkey) != text:
            raise MalformedInputException(
                f"Non-canonical address encoding: {text!r}",
                field_path=field_path,
            )
        return pubkey

    raise MalformedInputException(
        f"Unsupported address type: {type(value).__name__}",
        field_path=field_path,
    )


def derive_authority(
    merkle_root: bytes,
    program_id: Pubkey = DEFAULT_PROGRAM_ID,
) -> tuple[Pubkey, int]:
    """
    Derive the vault authority for a distribution root.

    Args:
        merkle_root: 32-byte Merkle root
        program_id: Distribution program address

    Returns:
        (authority address, bump seed)

    Raises:
        InvalidMerkleRootException: If the root is not 32 bytes
    """
    if len(merkle_root) != HASH_SIZE:
        raise InvalidMerkleRootException(
            f"Merkle root must be {HASH_SIZE} bytes, got {len(merkle_root)}"
        )
    return Pubkey.find_program_address([AUTHORITY_SEED, merkle_root], program_id)


def derive_associated_token_address(owner: Pubkey, mint: Pubkey) -> Pubkey:
    """Associated token account address for (owner, mint)."""
    address, _bump = Pubkey.find_program_address(
        [bytes(owner), bytes(TOKEN_PROGRAM_ID), bytes(mint)],
        ASSOCIATED_TOKEN_PROGRAM_ID,
    )
    return address


def new_address() -> Pubkey:
    """Fresh random account address (the distributor record's own key)."""
    return Keypair().pubkey()


__all__ = [
    "DEFAULT_PROGRAM_ID",
    "TOKEN_PROGRAM_ID",
    "ASSOCIATED_TOKEN_PROGRAM_ID",
    "SYSTEM_PROGRAM_ID",
    "RENT_SYSVAR_ID",
    "AUTHORITY_SEED",
    "AddressLike",
    "parse_address",
    "derive_authority",
    "derive_associated_token_address",
    "new_address",
]
