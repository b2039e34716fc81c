"""Tests for did_quickstart.cli.main — CLI commands via Click test runner."""
from __future__ import annotations

import asyncio
from collections.abc import Iterator
from unittest import mock

import pytest
from click.testing import CliRunner

from did_quickstart.cli.main import cli
from did_quickstart.credentials.credential import VerifiableCredential
from did_quickstart.credentials.jwt import sign_jwt
from did_quickstart.crypto.provider import CryptoProvider
from did_quickstart.did.did_key import create_did
from did_quickstart.errors import InvalidPasswordError
from did_quickstart.workflow import QuickstartWorkflow


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def fast_crypto() -> Iterator[None]:
    """Swap in a low-cost scrypt provider for commands that build their own."""
    with mock.patch(
        "did_quickstart.crypto.provider.CryptoProvider",
        side_effect=lambda: CryptoProvider(scrypt_n=2**10),
    ):
        yield


# ---------------------------------------------------------------------------
# Root CLI
# ---------------------------------------------------------------------------


class TestRootCLI:
    def test_help_exits_zero(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        for command in ("run", "resolve", "verify", "version"):
            assert command in result.output

    def test_version_command(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["version"])
        assert result.exit_code == 0
        assert "did-quickstart" in result.output.lower()


# ---------------------------------------------------------------------------
# run
# ---------------------------------------------------------------------------


class TestRunCommand:
    def test_run_prints_trace(self, runner: CliRunner, fast_crypto: None) -> None:
        result = runner.invoke(cli, ["run", "--password", "pw123"])
        assert result.exit_code == 0
        assert "Created DID: did:key:z" in result.output
        assert "Signed VC (JWT):" in result.output
        assert "Read VC from DWN:" in result.output
        assert "Parsed VC:" in result.output
        assert "\N{KEY}" not in result.output
        assert "Bearer DID: did:key:z" in result.output

    def test_run_uses_name_option(self, runner: CliRunner, fast_crypto: None) -> None:
        result = runner.invoke(cli, ["run", "-p", "pw123", "--name", "Bob Jones"])
        assert result.exit_code == 0
        assert "Bob Jones" in result.output

    def test_run_reads_password_from_environment(
        self, runner: CliRunner, fast_crypto: None
    ) -> None:
        result = runner.invoke(cli, ["run"], env={"DID_QUICKSTART_PASSWORD": "from-env"})
        assert result.exit_code == 0
        assert "Quickstart complete." in result.output

    def test_step_failure_is_reported_and_exits_zero(
        self, runner: CliRunner, fast_crypto: None
    ) -> None:
        with mock.patch.object(
            QuickstartWorkflow, "_connect", side_effect=InvalidPasswordError()
        ):
            result = runner.invoke(cli, ["run", "-p", "pw123"])
        assert result.exit_code == 0
        assert "An error occurred:" in result.output
        assert "Created DID" not in result.output
        assert "Quickstart complete." not in result.output

    def test_invalid_log_level_is_rejected(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["run", "--log-level", "LOUD"])
        assert result.exit_code != 0


# ---------------------------------------------------------------------------
# resolve
# ---------------------------------------------------------------------------


class TestResolveCommand:
    def test_resolve_known_did(self, runner: CliRunner) -> None:
        did = "did:key:z6MkhaXgBZDvotDkL5257faiztiGiC2QtKLGpbnnEGta2doK"
        result = runner.invoke(cli, ["resolve", did])
        assert result.exit_code == 0
        assert did in result.output
        assert "verificationMethod" in result.output

    def test_resolve_invalid_did_exits_one(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["resolve", "did:web:example.com"])
        assert result.exit_code == 1
        assert "Error:" in result.output
        assert "did:web:example.com" in result.output


# ---------------------------------------------------------------------------
# verify
# ---------------------------------------------------------------------------


class TestVerifyCommand:
    def test_verify_valid_token(self, runner: CliRunner) -> None:
        bearer = create_did(CryptoProvider(scrypt_n=2**10))
        vc = VerifiableCredential.create(
            type="TestCredential", issuer=bearer.uri, subject=bearer.uri, data={"name": "Alice"}
        )
        token = asyncio.run(vc.sign(bearer))
        result = runner.invoke(cli, ["verify", token])
        assert result.exit_code == 0
        assert result.output.startswith("VALID")
        assert bearer.uri in result.output

    def test_verify_garbage_exits_one(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["verify", "not-a-token"])
        assert result.exit_code == 1
        assert result.output.startswith("INVALID")

    def test_verify_prints_issuer_did_verbatim(self, runner: CliRunner) -> None:
        bearer = create_did(CryptoProvider(scrypt_n=2**10))
        vc = VerifiableCredential.create(type="TestCredential", issuer=bearer.uri, subject=bearer.uri)
        result = runner.invoke(cli, ["verify", asyncio.run(vc.sign(bearer))])
        assert f"issued by {bearer.uri}" in result.output

    def test_verify_malformed_time_claim_exits_one(self, runner: CliRunner) -> None:
        bearer = create_did(CryptoProvider(scrypt_n=2**10))
        vc = VerifiableCredential.create(type="TestCredential", issuer=bearer.uri, subject=bearer.uri)
        token = sign_jwt(
            bearer,
            {"iss": bearer.uri, "sub": bearer.uri, "vc": vc.to_dict(), "nbf": "soon"},
        )
        result = runner.invoke(cli, ["verify", token])
        assert result.exit_code == 1
        assert result.output.startswith("INVALID")
        assert "NumericDate" in result.output
