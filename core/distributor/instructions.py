"""
Unsigned instruction payloads.

The signing/submission collaborator receives these instructions, signs and
submits them. Wire format per instruction:

    discriminator[8] = sha256("global:<name>")[:8]
    followed by Borsh-encoded args

initialize(merkle_root: [u8; 32], total_supply: u128)
claim(index: u32, amount: u64, proof: Vec<[u8; 32]>)

Vec is a u32 little-endian length followed by the elements; the proof is
ordered leaf-to-root.
"""
from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import Any

from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey

from core.crypto.hashing import HASH_SIZE, sha256, to_hex
from core.crypto.keys import (
    ASSOCIATED_TOKEN_PROGRAM_ID,
    DEFAULT_PROGRAM_ID,
    RENT_SYSVAR_ID,
    SYSTEM_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
    derive_authority,
)
from core.merkle.leaf_codec import U32_MAX, U64_MAX
from core.schemas.errors import InvalidMerkleRootException, MalformedInputException


def instruction_discriminator(name: str) -> bytes:
    """First 8 bytes of sha256("global:<name>")."""
    return sha256(f"global:{name}".encode("utf-8"))[:8]


INITIALIZE_DISCRIMINATOR = instruction_discriminator("initialize")
CLAIM_DISCRIMINATOR = instruction_discriminator("claim")

_U128_MAX = 2**128 - 1


@dataclass(frozen=True)
class InitializeArgs:
    merkle_root: bytes
    total_supply: int

    def __post_init__(self) -> None:
        if len(self.merkle_root) != HASH_SIZE:
            raise InvalidMerkleRootException(
                f"Merkle root must be {HASH_SIZE} bytes, got {len(self.merkle_root)}"
            )
        if self.total_supply < 0 or self.total_supply > _U128_MAX:
            raise MalformedInputException(
                f"total_supply {self.total_supply} out of u128 range",
                field_path="total_supply",
            )

    def encode(self) -> bytes:
        return (
            INITIALIZE_DISCRIMINATOR
            + self.merkle_root
            + self.total_supply.to_bytes(16, "little")
        )

    @classmethod
    def decode(cls, data: bytes) -> "InitializeArgs":
        if data[:8] != INITIALIZE_DISCRIMINATOR:
            raise MalformedInputException("Not an initialize instruction", field_path="data")
        if len(data) != 8 + 32 + 16:
            raise MalformedInputException(
                f"initialize data must be 56 bytes, got {len(data)}",
                field_path="data",
            )
        return cls(
            merkle_root=data[8:40],
            total_supply=int.from_bytes(data[40:56], "little"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"merkle_root": to_hex(self.merkle_root), "total_supply": self.total_supply}


@dataclass(frozen=True)
class ClaimArgs:
    index: int
    amount: int
    proof: list[bytes] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.index < 0 or self.index > U32_MAX:
            raise MalformedInputException(f"index {self.index} out of u32 range", field_path="index")
        if self.amount < 0 or self.amount > U64_MAX:
            raise MalformedInputException(f"amount {self.amount} out of u64 range", field_path="amount")
        for i, sibling in enumerate(self.proof):
            if len(sibling) != HASH_SIZE:
                raise MalformedInputException(
                    f"Proof element {i} must be {HASH_SIZE} bytes",
                    field_path=f"proof[{i}]",
                )

    def encode(self) -> bytes:
        return (
            CLAIM_DISCRIMINATOR
            + struct.pack("<IQI", self.index, self.amount, len(self.proof))
            + b"".join(self.proof)
        )

    @classmethod
    def decode(cls, data: bytes) -> "ClaimArgs":
        if data[:8] != CLAIM_DISCRIMINATOR:
            raise MalformedInputException("Not a claim instruction", field_path="data")
        if len(data) < 8 + 16:
            raise MalformedInputException("claim data truncated", field_path="data")
        index, amount, count = struct.unpack_from("<IQI", data, 8)
        body = data[24:]
        if len(body) != count * HASH_SIZE:
            raise MalformedInputException(
                f"claim proof length mismatch: {count} elements, {len(body)} bytes",
                field_path="data",
            )
        proof = [body[i:i + HASH_SIZE] for i in range(0, len(body), HASH_SIZE)]
        return cls(index=index, amount=amount, proof=proof)

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "amount": self.amount,
            "proof": [to_hex(p) for p in self.proof],
        }


def build_initialize_instruction(
    args: InitializeArgs,
    distributor: Pubkey,
    vault: Pubkey,
    payer: Pubkey,
    token_mint: Pubkey,
    program_id: Pubkey = DEFAULT_PROGRAM_ID,
) -> Instruction:
    """Unsigned initialize instruction; distributor and payer must sign."""
    authority, _bump = derive_authority(args.merkle_root, program_id)
    accounts = [
        AccountMeta(distributor, is_signer=True, is_writable=True),
        AccountMeta(authority, is_signer=False, is_writable=False),
        AccountMeta(vault, is_signer=False, is_writable=True),
        AccountMeta(payer, is_signer=True, is_writable=True),
        AccountMeta(token_mint, is_signer=False, is_writable=False),
        AccountMeta(ASSOCIATED_TOKEN_PROGRAM_ID, is_signer=False, is_writable=False),
        AccountMeta(TOKEN_PROGRAM_ID, is_signer=False, is_writable=False),
        AccountMeta(SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
        AccountMeta(RENT_SYSVAR_ID, is_signer=False, is_writable=False),
    ]
    return Instruction(program_id, args.encode(), accounts)


def build_claim_instruction(
    args: ClaimArgs,
    distributor: Pubkey,
    merkle_root: bytes,
    vault: Pubkey,
    user_token_account: Pubkey,
    token_mint: Pubkey,
    program_id: Pubkey = DEFAULT_PROGRAM_ID,
) -> Instruction:
    """Unsigned claim instruction; authorised by the derived authority."""
    authority, _bump = derive_authority(merkle_root, program_id)
    accounts = [
        AccountMeta(distributor, is_signer=False, is_writable=True),
        AccountMeta(authority, is_signer=False, is_writable=True),
        AccountMeta(vault, is_signer=False, is_writable=True),
        AccountMeta(user_token_account, is_signer=False, is_writable=True),
        AccountMeta(token_mint, is_signer=False, is_writable=False),
        AccountMeta(ASSOCIATED_TOKEN_PROGRAM_ID, is_signer=False, is_writable=False),
        AccountMeta(TOKEN_PROGRAM_ID, is_signer=False, is_writable=False),
        AccountMeta(SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
        AccountMeta(RENT_SYSVAR_ID, is_signer=False, is_writable=False),
    ]
    return Instruction(program_id, args.encode(), accounts)


def instruction_to_dict(ix: Instruction) -> dict[str, Any]:
    """JSON form handed to the signing collaborator."""
    return {
        "program_id": str(ix.program_id),
        "accounts": [
            {
                "pubkey": str(meta.pubkey),
                "is_signer": meta.is_signer,
                "is_writable": meta.is_writable,
            }
            for meta in ix.accounts
        ],
        "data": to_hex(bytes(ix.data)),
    }


__all__ = [
    "INITIALIZE_DISCRIMINATOR",
    "CLAIM_DISCRIMINATOR",
    "instruction_discriminator",
    "InitializeArgs",
    "ClaimArgs",
    "build_initialize_instruction",
    "build_claim_instruction",
    "instruction_to_dict",
]
