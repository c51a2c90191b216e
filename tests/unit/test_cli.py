"""
CLI Tests

Runs distributor_cli.main.main() in-process:
1. build writes merkle-root.txt, proof-<i>.json, distribution.json
2. verify exits 0 for a good proof and 2 for a tampered one
3. authority prints the derived address
4. instruction claim refuses a bad proof
5. config --init / --show
"""

import json

import pytest

from core.crypto.keys import derive_authority, new_address
from core.crypto.hashing import parse_hash32
from distributor_cli.main import (
    EXIT_RUNTIME_ERROR,
    EXIT_SUCCESS,
    EXIT_VERIFICATION_FAILED,
    main,
)


@pytest.fixture
def recipients_file(tmp_path, recipients):
    path = tmp_path / "recipients.json"
    path.write_text(json.dumps(recipients))
    return path


@pytest.fixture
def built(tmp_path, recipients_file, monkeypatch):
    monkeypatch.chdir(tmp_path)
    out = tmp_path / "out"
    assert main(["build", str(recipients_file), "--out", str(out)]) == EXIT_SUCCESS
    return out


class TestBuild:

    def test_writes_artifacts(self, built):
        assert (built / "merkle-root.txt").read_text().startswith("0x")
        assert json.loads((built / "proof-0.json").read_text())
        assert (built / "proof-1.json").exists()
        plan = json.loads((built / "distribution.json").read_text())
        assert plan["total_amount"] == 350

    def test_json_output(self, recipients_file, capsys):
        assert main(["build", str(recipients_file), "--json"]) == EXIT_SUCCESS
        data = json.loads(capsys.readouterr().out)
        assert len(data["claims"]) == 2

    def test_missing_file(self, tmp_path):
        assert main(["build", str(tmp_path / "nope.json")]) == EXIT_RUNTIME_ERROR

    def test_duplicate_recipient(self, tmp_path):
        address = str(new_address())
        path = tmp_path / "dupes.json"
        path.write_text(json.dumps([{"address": address, "amount": 1}, {"address": address, "amount": 2}]))
        assert main(["build", str(path)]) == EXIT_RUNTIME_ERROR


class TestVerify:

    def _args(self, built, recipients, index, amount=None):
        return [
            "verify",
            "--root", (built / "merkle-root.txt").read_text(),
            "--index", str(index),
            "--recipient", recipients[index]["address"],
            "--amount", str(recipients[index]["amount"] if amount is None else amount),
            "--proof", str(built / f"proof-{index}.json"),
        ]

    def test_valid(self, built, recipients):
        assert main(self._args(built, recipients, 1)) == EXIT_SUCCESS

    def test_wrong_amount(self, built, recipients):
        assert main(self._args(built, recipients, 1, amount=300)) == EXIT_VERIFICATION_FAILED

    def test_bad_root(self, built, recipients):
        args = self._args(built, recipients, 0)
        args[args.index("--root") + 1] = "0x1234"
        assert main(args) == EXIT_RUNTIME_ERROR


class TestAuthority:

    def test_prints_derived_authority(self, built, capsys):
        root = (built / "merkle-root.txt").read_text()
        capsys.readouterr()

        assert main(["authority", root, "--json"]) == EXIT_SUCCESS

        data = json.loads(capsys.readouterr().out)
        authority, bump = derive_authority(parse_hash32(root))
        assert data["authority"] == str(authority)
        assert data["bump"] == bump


class TestInstruction:

    def _claim_args(self, built, recipients, amount):
        return [
            "instruction", "claim",
            "--root", (built / "merkle-root.txt").read_text(),
            "--index", "0",
            "--amount", str(amount),
            "--recipient", recipients[0]["address"],
            "--proof", str(built / "proof-0.json"),
            "--distributor", str(new_address()),
            "--vault", str(new_address()),
            "--mint", str(new_address()),
        ]

    def test_claim(self, built, recipients, capsys):
        capsys.readouterr()
        assert main(self._claim_args(built, recipients, 100)) == EXIT_SUCCESS
        data = json.loads(capsys.readouterr().out)
        assert data["args"] == {
            "index": 0,
            "amount": 100,
            "proof": json.loads((built / "proof-0.json").read_text()),
        }

    def test_claim_bad_proof(self, built, recipients):
        assert main(self._claim_args(built, recipients, 101)) == EXIT_VERIFICATION_FAILED

    def test_claim_bad_proof_without_check(self, built, recipients):
        args = self._claim_args(built, recipients, 101) + ["--no-verify"]
        assert main(args) == EXIT_SUCCESS

    def test_initialize(self, built, capsys):
        capsys.readouterr()
        args = [
            "instruction", "initialize",
            "--root", (built / "merkle-root.txt").read_text(),
            "--supply", "350",
            "--distributor", str(new_address()),
            "--vault", str(new_address()),
            "--payer", str(new_address()),
            "--mint", str(new_address()),
        ]
        assert main(args) == EXIT_SUCCESS
        assert json.loads(capsys.readouterr().out)["args"]["total_supply"] == 350


class TestConfig:

    def test_init_then_show(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        assert main(["config", "--init"]) == EXIT_SUCCESS
        assert (tmp_path / "distributor.json").exists()
        assert main(["config", "--init"]) == EXIT_RUNTIME_ERROR

        capsys.readouterr()
        assert main(["config", "--show"]) == EXIT_SUCCESS
        shown = json.loads(capsys.readouterr().out)
        assert shown["distributor"]["default_capacity"] == 16

    def test_no_command(self):
        assert main([]) == EXIT_RUNTIME_ERROR
