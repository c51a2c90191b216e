"""
Claim Processor Unit Tests
Tests for core/distributor/claim.py and core/distributor/ledger.py

Scenario: entries A (index 0, 100) and B (index 1, 250), vault funded 350.
"""
import threading

import pytest

from core.crypto.hashing import keccak256
from core.crypto.keys import derive_associated_token_address, new_address
from core.distributor.claim import ClaimOutcome
from core.distributor.ledger import Ledger, format_amount
from core.distributor.state import DistributorStatus
from core.schemas.errors import (
    AccountNotFoundException,
    AlreadyClaimedException,
    ErrorCodes,
    IndexOutOfRangeException,
    InsufficientVaultBalanceException,
    InvalidMerkleRootException,
    MalformedInputException,
    RecipientAccountMissingException,
)

from fixtures.distributor_fixtures import make_distributor, make_recipients


class TestTwoEntryScenario:

    def test_claim_a(self, two_entry_distributor):
        setup = two_entry_distributor

        assert setup.claim(0) == 100

        assert setup.ledger.balance(setup.token_account(0)) == 100
        assert setup.ledger.balance(setup.vault) == 250
        assert setup.record.claimed_bitmap == bytes([0b01, 0])

    def test_claim_a_again_rejected(self, two_entry_distributor):
        setup = two_entry_distributor
        setup.claim(0)

        with pytest.raises(AlreadyClaimedException) as exc_info:
            setup.claim(0)

        assert exc_info.value.code == ErrorCodes.ALREADY_CLAIMED
        assert exc_info.value.program_error == 6001
        assert setup.ledger.balance(setup.vault) == 250
        assert setup.ledger.balance(setup.token_account(0)) == 100

    def test_claim_both(self, two_entry_distributor):
        setup = two_entry_distributor
        setup.claim(0)
        setup.claim(1)

        assert setup.ledger.balance(setup.vault) == 0
        assert setup.ledger.balance(setup.token_account(1)) == 250
        assert setup.record.claimed_bitmap == bytes([0b11, 0])

    def test_wrong_amount_rejected(self, two_entry_distributor):
        setup = two_entry_distributor

        with pytest.raises(InvalidMerkleRootException) as exc_info:
            setup.claim(1, amount=300)

        assert exc_info.value.program_error == 6000
        assert setup.ledger.balance(setup.vault) == 350
        assert setup.record.claimed_bitmap == bytes(2)

    def test_other_entrys_proof_rejected(self, two_entry_distributor):
        setup = two_entry_distributor
        with pytest.raises(InvalidMerkleRootException):
            setup.claim(0, proof=setup.plan.proof(1).siblings)

    def test_other_recipient_rejected(self, two_entry_distributor):
        setup = two_entry_distributor
        entry = setup.plan.entries[0]
        other = setup.plan.entries[1].recipient

        with pytest.raises(InvalidMerkleRootException):
            setup.processor.claim(
                setup.address, 0, entry.amount, other, setup.plan.proof(0).siblings,
            )
        assert setup.ledger.balance(setup.vault) == 350
        assert setup.record.claimed_bitmap == bytes(2)

    def test_tampered_proof_rejected(self, two_entry_distributor):
        setup = two_entry_distributor
        with pytest.raises(InvalidMerkleRootException):
            setup.claim(0, proof=[keccak256(b"forged")])

    def test_claim_into_other_account_of_recipient_rejected(self, two_entry_distributor):
        """Funds may only go to an account owned by the leaf's recipient."""
        setup = two_entry_distributor
        other_owner = new_address()
        other_account = setup.ledger.create_token_account(other_owner, setup.mint)
        entry = setup.plan.entries[0]

        with pytest.raises(MalformedInputException):
            setup.processor.claim(
                setup.address, 0, entry.amount, entry.recipient,
                setup.plan.proof(0).siblings, token_account=other_account,
            )
        assert setup.ledger.balance(setup.vault) == 350


class TestClaimEdgeCases:

    def test_missing_receiving_account(self):
        setup = make_distributor(provision_recipients=False)
        with pytest.raises(RecipientAccountMissingException):
            setup.claim(0)
        assert setup.record.claimed_bitmap == bytes(2)

    def test_unknown_distributor(self, two_entry_distributor):
        setup = two_entry_distributor
        entry = setup.plan.entries[0]
        with pytest.raises(AccountNotFoundException):
            setup.processor.claim(new_address(), 0, entry.amount, entry.recipient, [])

    def test_malformed_proof_element(self, two_entry_distributor):
        setup = two_entry_distributor
        with pytest.raises(MalformedInputException):
            setup.claim(0, proof=[b"\x00" * 31])

    def test_insufficient_vault(self):
        # Vault funded (and committed) with only 50
        setup = make_distributor(fund=50)

        with pytest.raises(InsufficientVaultBalanceException) as exc_info:
            setup.claim(1)

        assert exc_info.value.details == {"required": 250, "available": 50}
        assert not setup.record.is_claimed(1)
        assert setup.ledger.balance(setup.vault) == 50
        assert setup.ledger.balance(setup.token_account(1)) == 0

    def test_status_exhausted_when_all_bits_set(self):
        setup = make_distributor(make_recipients([1] * 8), capacity=8)
        for i in range(8):
            setup.claim(i)
        assert setup.record.status == DistributorStatus.EXHAUSTED


class TestCapacityBoundary:

    def test_index_15_accepted(self):
        setup = make_distributor(make_recipients([1] * 16))
        assert setup.claim(15) == 1
        assert setup.record.is_claimed(15)

    def test_index_16_rejected_with_default_capacity(self):
        setup = make_distributor(make_recipients([1] * 17))

        with pytest.raises(IndexOutOfRangeException):
            setup.claim(16)
        assert setup.ledger.balance(setup.vault) == 17

    def test_index_16_accepted_with_larger_capacity(self):
        setup = make_distributor(make_recipients([1] * 17), capacity=24)
        assert setup.claim(16) == 1


class TestIdempotentClaim:

    def test_retry_is_noop(self, two_entry_distributor):
        setup = two_entry_distributor
        entry = setup.plan.entries[0]
        siblings = setup.plan.proof(0).siblings

        first = setup.processor.claim_idempotent(setup.address, 0, entry.amount, entry.recipient, siblings)
        retry = setup.processor.claim_idempotent(setup.address, 0, entry.amount, entry.recipient, siblings)

        assert first == ClaimOutcome(index=0, transferred=100)
        assert retry == ClaimOutcome(index=0, transferred=0, already_claimed=True)
        assert setup.ledger.balance(setup.token_account(0)) == 100

    def test_other_errors_propagate(self, two_entry_distributor):
        setup = two_entry_distributor
        entry = setup.plan.entries[0]
        with pytest.raises(InvalidMerkleRootException):
            setup.processor.claim_idempotent(setup.address, 0, entry.amount + 1, entry.recipient, [])


class TestConcurrency:

    def test_no_double_payout_under_contention(self, two_entry_distributor):
        setup = two_entry_distributor
        results: list[str] = []
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            try:
                setup.claim(1)
                results.append("ok")
            except AlreadyClaimedException:
                results.append("already")

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results.count("ok") == 1
        assert results.count("already") == 7
        assert setup.ledger.balance(setup.token_account(1)) == 250
        assert setup.ledger.balance(setup.vault) == 100

    def test_distributors_are_independent(self):
        ledger = Ledger()
        first = make_distributor(ledger=ledger)
        second = make_distributor(ledger=ledger)

        assert ledger.lock_for(first.address) is not ledger.lock_for(second.address)
        first.claim(0)
        second.claim(0)
        assert not first.record.is_claimed(1)
        assert ledger.balance(first.vault) == ledger.balance(second.vault) == 250


class TestLedger:

    def test_create_token_account_idempotent(self):
        ledger = Ledger()
        owner, mint = new_address(), new_address()
        address = ledger.create_token_account(owner, mint)
        assert ledger.create_token_account(owner, mint) == address
        assert address == derive_associated_token_address(owner, mint)

    def test_conflicting_account_rejected(self):
        ledger = Ledger()
        address = ledger.create_token_account(new_address(), new_address())
        with pytest.raises(MalformedInputException):
            ledger.create_token_account(new_address(), new_address(), address)

    def test_all_distributors(self, two_entry_distributor):
        setup = two_entry_distributor
        assert [a for a, _ in setup.ledger.all_distributors()] == [setup.address]

    @pytest.mark.parametrize("amount, decimals, expected", [
        (1_500_000_000, 9, "1.50"),
        (0, 9, "0.00"),
        (250, 2, "2.50"),
        (2**63 + 1, 0, "9223372036854775809.00"),
        (2**64 - 1, 9, "18446744073.71"),
        (1_005_000_000, 9, "1.01"),
        (1_004_999_999, 9, "1.00"),
    ])
    def test_format_amount(self, amount, decimals, expected):
        assert format_amount(amount, decimals) == expected
