import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from starledger.cli.main import app
from starledger.core.block import Block
from starledger.crypto.signatures import WalletKey, verify_message

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    monkeypatch.delenv("STARLEDGER_SNAPSHOT_PATH", raising=False)
    monkeypatch.delenv("STARLEDGER_CHALLENGE_WINDOW", raising=False)
    monkeypatch.delenv("STARLEDGER_TESTNET", raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def snapshot(tmp_path: Path) -> Path:
    path = tmp_path / "chain.jsonl"
    result = runner.invoke(app, ["demo", "--output", str(path), "--stars", "4", "--owners", "2"])
    assert result.exit_code == 0, result.stdout
    return path


def test_challenge_prints_message():
    result = runner.invoke(app, ["challenge", "1BoatSLRHtKNngkdXEeobR76b53LETtpyT"])
    assert result.exit_code == 0
    address, issued, tag = result.stdout.strip().split(":")
    assert address == "1BoatSLRHtKNngkdXEeobR76b53LETtpyT"
    assert issued.isdigit()
    assert tag == "starRegistry"


def test_keygen_sign_verify_message():
    result = runner.invoke(app, ["keygen"])
    assert result.exit_code == 0
    lines = dict(line.split(":", 1) for line in result.stdout.strip().splitlines())
    address = lines["address"].strip()
    wif = lines["wif"].strip()
    assert WalletKey.from_wif(wif).address == address

    message = f"{address}:1700000000:starRegistry"
    result = runner.invoke(app, ["sign", message, "--wif", wif])
    assert result.exit_code == 0
    signature = result.stdout.strip()
    assert verify_message(message, address, signature)

    result = runner.invoke(app, ["verify-message", message, address, signature])
    assert result.exit_code == 0
    assert "valid" in result.stdout.lower()

    result = runner.invoke(app, ["verify-message", message + "x", address, signature])
    assert result.exit_code == 1


def test_keygen_testnet():
    result = runner.invoke(app, ["keygen", "--testnet"])
    assert result.exit_code == 0
    address = result.stdout.splitlines()[0].split(":", 1)[1].strip()
    assert address[0] in "mn"


def test_sign_rejects_bad_wif():
    result = runner.invoke(app, ["sign", "hello", "--wif", "nope"])
    assert result.exit_code == 1
    assert "invalid wif" in result.stdout.lower()


def test_demo_exports_chain(snapshot: Path):
    lines = snapshot.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 5
    assert json.loads(lines[0])["previous_block_hash"] is None


def test_verify_valid_snapshot(snapshot: Path):
    result = runner.invoke(app, ["verify", str(snapshot)])
    assert result.exit_code == 0
    assert "valid" in result.stdout.lower()


def test_verify_tampered_snapshot(snapshot: Path):
    lines = snapshot.read_text(encoding="utf-8").splitlines()
    record = json.loads(lines[1])
    record["time"] += 1
    lines[1] = json.dumps(record)
    snapshot.write_text("\n".join(lines) + "\n", encoding="utf-8")

    result = runner.invoke(app, ["verify", str(snapshot)])
    assert result.exit_code == 1
    assert "integrity" in result.stdout


def test_verify_missing_file(tmp_path: Path):
    result = runner.invoke(app, ["verify", str(tmp_path / "missing.jsonl")])
    assert result.exit_code == 1
    assert "not found" in result.stdout.lower()


def test_verify_uses_env_path(snapshot: Path, monkeypatch):
    monkeypatch.setenv("STARLEDGER_SNAPSHOT_PATH", str(snapshot))
    result = runner.invoke(app, ["verify"])
    assert result.exit_code == 0


def test_blocks_table(snapshot: Path):
    result = runner.invoke(app, ["blocks", str(snapshot)])
    assert result.exit_code == 0
    assert "Blocks" in result.stdout


def test_stars_for_owner(snapshot: Path):
    first_owner = json.loads(snapshot.read_text(encoding="utf-8").splitlines()[1])
    owner = Block.from_dict(first_owner).decode_body().owner

    result = runner.invoke(app, ["stars", owner, "--file", str(snapshot)])
    assert result.exit_code == 0
    assert "Demo star #0" in result.stdout
    assert "Demo star #2" in result.stdout
    assert "Demo star #1" not in result.stdout


def test_stars_unknown_owner(snapshot: Path):
    result = runner.invoke(app, ["stars", "1NobodyHere", "--file", str(snapshot)])
    assert result.exit_code == 0
    assert "no stars found" in result.stdout.lower()
