"""
Instruction Codec Unit Tests
Tests for core/distributor/instructions.py
"""
import struct

import pytest

from core.crypto.hashing import keccak256
from core.crypto.keys import (
    DEFAULT_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
    derive_authority,
    new_address,
)
from core.distributor.instructions import (
    CLAIM_DISCRIMINATOR,
    INITIALIZE_DISCRIMINATOR,
    ClaimArgs,
    InitializeArgs,
    build_claim_instruction,
    build_initialize_instruction,
    instruction_discriminator,
    instruction_to_dict,
)
from core.schemas.errors import InvalidMerkleRootException, MalformedInputException


ROOT = keccak256(b"instruction root")


class TestDiscriminators:

    def test_claim(self):
        assert CLAIM_DISCRIMINATOR == bytes([62, 198, 214, 193, 213, 159, 108, 210])

    def test_initialize(self):
        assert INITIALIZE_DISCRIMINATOR == bytes([175, 175, 109, 31, 13, 152, 155, 237])

    def test_length(self):
        assert len(instruction_discriminator("anything")) == 8


class TestInitializeArgs:

    def test_encoding(self):
        data = InitializeArgs(merkle_root=ROOT, total_supply=350).encode()
        assert data[:8] == INITIALIZE_DISCRIMINATOR
        assert data[8:40] == ROOT
        assert data[40:] == (350).to_bytes(16, "little")

    def test_decode(self):
        args = InitializeArgs(merkle_root=ROOT, total_supply=2**127)
        assert InitializeArgs.decode(args.encode()) == args

    def test_bad_root(self):
        with pytest.raises(InvalidMerkleRootException):
            InitializeArgs(merkle_root=ROOT[:16], total_supply=1)

    def test_wrong_discriminator(self):
        with pytest.raises(MalformedInputException):
            InitializeArgs.decode(CLAIM_DISCRIMINATOR + ROOT + bytes(16))


class TestClaimArgs:

    def test_encoding(self):
        proof = [keccak256(b"p0"), keccak256(b"p1")]
        data = ClaimArgs(index=1, amount=250, proof=proof).encode()

        assert data[:8] == CLAIM_DISCRIMINATOR
        assert data[8:24] == struct.pack("<IQI", 1, 250, 2)
        assert data[24:] == proof[0] + proof[1]

    def test_decode(self):
        args = ClaimArgs(index=3, amount=9, proof=[keccak256(b"x")])
        assert ClaimArgs.decode(args.encode()) == args

    def test_empty_proof(self):
        args = ClaimArgs(index=0, amount=1)
        assert len(args.encode()) == 24
        assert ClaimArgs.decode(args.encode()).proof == []

    def test_truncated_proof_rejected(self):
        data = ClaimArgs(index=0, amount=1, proof=[keccak256(b"x")]).encode()
        with pytest.raises(MalformedInputException):
            ClaimArgs.decode(data[:-1])

    def test_out_of_range(self):
        with pytest.raises(MalformedInputException):
            ClaimArgs(index=2**32, amount=1)
        with pytest.raises(MalformedInputException):
            ClaimArgs(index=0, amount=2**64)


class TestBuildInstructions:

    def test_claim_accounts(self):
        distributor, vault, user, mint = (new_address() for _ in range(4))
        ix = build_claim_instruction(
            ClaimArgs(index=0, amount=100),
            distributor=distributor,
            merkle_root=ROOT,
            vault=vault,
            user_token_account=user,
            token_mint=mint,
        )
        authority, _ = derive_authority(ROOT)

        assert ix.program_id == DEFAULT_PROGRAM_ID
        assert [m.pubkey for m in ix.accounts[:5]] == [distributor, authority, vault, user, mint]
        assert not any(m.is_signer for m in ix.accounts)
        assert bytes(ix.data)[:8] == CLAIM_DISCRIMINATOR

    def test_initialize_signers(self):
        distributor, vault, payer, mint = (new_address() for _ in range(4))
        ix = build_initialize_instruction(
            InitializeArgs(merkle_root=ROOT, total_supply=10),
            distributor=distributor,
            vault=vault,
            payer=payer,
            token_mint=mint,
        )
        signers = [m.pubkey for m in ix.accounts if m.is_signer]
        assert signers == [distributor, payer]
        assert TOKEN_PROGRAM_ID in [m.pubkey for m in ix.accounts]

    def test_to_dict(self):
        ix = build_claim_instruction(
            ClaimArgs(index=0, amount=1),
            distributor=new_address(),
            merkle_root=ROOT,
            vault=new_address(),
            user_token_account=new_address(),
            token_mint=new_address(),
        )
        data = instruction_to_dict(ix)
        assert data["program_id"] == str(DEFAULT_PROGRAM_ID)
        assert data["data"].startswith("0x" + CLAIM_DISCRIMINATOR.hex())
        assert len(data["accounts"]) == 9
