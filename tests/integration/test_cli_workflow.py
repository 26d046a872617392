"""
Integration Tests for the credential CLI

Drives CredentialCLI end to end: hash a password, feed the printed
record back into verify and expired, through arguments and stdin.
"""

import io
import json
import subprocess
import sys
from pathlib import Path

import pytest

from credential import CredentialEngine, EngineConfig, LegacyScheme
from credential.cli import CredentialCLI


class CLIRunner:
    """Runs CredentialCLI with captured streams."""

    def __init__(self, engine):
        self.engine = engine

    def __call__(self, args, stdin=""):
        out, err = io.StringIO(), io.StringIO()
        cli = CredentialCLI(self.engine, stdin=io.StringIO(stdin), stdout=out, stderr=err)
        code = cli.run(args)
        return code, out.getvalue(), err.getvalue()


@pytest.fixture
def run(engine):
    return CLIRunner(engine)


class TestHashCommand:
    """credential hash"""

    def test_hash_argument(self, run, engine):
        code, out, _ = run(["hash", "password"])

        assert code == 0
        assert engine.verify(out.strip(), "password") is True

    def test_hash_stdin_dash(self, run, engine):
        code, out, _ = run(["hash", "-"], stdin="password")

        assert code == 0
        assert engine.verify(out.strip(), "password") is True

    def test_hash_stdin_implicit(self, run, engine):
        code, out, _ = run(["hash"], stdin="password\n")

        assert code == 0
        assert engine.verify(out.strip(), "password") is True

    def test_hash_overrides(self, run):
        code, out, _ = run(["hash", "password", "--work", "0.5", "--key-length", "12"])
        data = json.loads(out)

        assert code == 0
        assert data["keyLength"] == 12
        assert data["iterations"] == 500

    def test_hash_empty_password_errors(self, run):
        code, out, err = run(["hash", "-"], stdin="")

        assert code == 1
        assert out == ""
        assert "Error: InvalidInput" in err

    def test_hash_invalid_work_errors(self, run):
        code, _, err = run(["hash", "password", "-w", "0"])

        assert code == 1
        assert "InvalidConfig" in err


class TestVerifyCommand:
    """credential verify"""

    def test_verified(self, run, engine):
        stored = engine.encode(engine.hash("password"))
        code, out, _ = run(["verify", stored, "password"])

        assert code == 0
        assert out.strip() == "Verified"

    def test_verify_stdin(self, run, engine):
        stored = engine.encode(engine.hash("password"))
        code, out, _ = run(["verify", "-", "password"], stdin=stored + "\n")

        assert code == 0
        assert out.strip() == "Verified"

    def test_invalid(self, run, engine):
        stored = engine.encode(engine.hash("password"))
        code, out, _ = run(["verify", stored, "wrong"])

        assert code == 1
        assert out.strip() == "Invalid"

    def test_malformed_record(self, run):
        code, out, err = run(["verify", "not json", "password"])

        assert code == 1
        assert out == ""
        assert "MalformedRecord" in err

    def test_legacy_record_verifies(self):
        legacy = "AAECAwQFBgcICQoLDA0ODw==$W2+YKcWoI02dqa8FlWIq/Q=="
        engine = CredentialEngine(EngineConfig(key_length=16), legacy=LegacyScheme(work_units=1, work_key=0))
        code, out, _ = CLIRunner(engine)(["verify", legacy, "foo"])

        assert (code, out.strip()) == (0, "Verified")

    def test_unsupported_method(self, run, engine):
        data = engine.hash("password").to_dict()
        data["hashMethod"] = "bcrypt"
        code, _, err = run(["verify", json.dumps(data), "password"])

        assert code == 1
        assert "UnsupportedAlgorithm" in err


class TestExpiredCommand:
    """credential expired"""

    def test_not_expired(self, run, engine):
        stored = engine.encode(engine.hash("password"))
        code, out, _ = run(["expired", stored])

        assert code == 0
        assert out.strip() == "Not expired"

    def test_expired_with_future_threshold(self, run, engine):
        stored = engine.encode(engine.hash("password"))
        code, out, err = run(["expired", stored, "-2"])

        assert code == 1
        assert out == ""
        assert err.strip().splitlines()[-1] == "Expired"

    def test_century_old_threshold_not_expired(self, run, engine):
        stored = engine.encode(engine.hash("password"))
        code, out, _ = run(["expired", stored, "36500"])

        assert code == 0
        assert out.strip() == "Not expired"

    def test_days_out_of_range_errors(self, run, engine):
        stored = engine.encode(engine.hash("password"))
        code, _, err = run(["expired", stored, "1e12"])

        assert code == 1
        assert "InvalidInput" in err

    def test_expired_stdin(self, run, engine):
        stored = engine.encode(engine.hash("password"))
        code, out, _ = run(["expired", "-", "30"], stdin=stored)

        assert code == 0
        assert out.strip() == "Not expired"


class TestCommandLine:
    """Parser behaviour and the installed entry point."""

    def test_no_command_prints_help(self, run):
        code, out, _ = run([])

        assert code == 0
        assert "hash" in out and "verify" in out and "expired" in out

    def test_version(self, run):
        with pytest.raises(SystemExit) as exc_info:
            run(["--version"])
        assert exc_info.value.code == 0

    def test_hash_then_verify_across_engines(self, fixed_clock):
        """A record printed by one process verifies in another configuration."""
        writer = CLIRunner(CredentialEngine(clock=fixed_clock, legacy=LegacyScheme()))
        _, stored, _ = writer(["hash", "-k", "20", "s3cret"])

        reader = CLIRunner(CredentialEngine(clock=fixed_clock, legacy=LegacyScheme()).configure(work=4))
        code, out, _ = reader(["verify", stored.strip(), "s3cret"])
        assert (code, out.strip()) == (0, "Verified")

    def test_source_checkout_launcher(self, project_root):
        launcher = Path(project_root) / "python-cli" / "main.py"
        result = subprocess.run(
            [sys.executable, str(launcher), "verify", "not json", "password"],
            capture_output=True,
            text=True,
            timeout=60,
        )

        assert result.returncode == 1
        assert "MalformedRecord" in result.stderr
