"""Run the scripts under examples/ end to end."""
from __future__ import annotations

import asyncio
import runpy
from pathlib import Path

import pytest

EXAMPLES_DIR = Path(__file__).resolve().parents[1] / "examples"


def test_quickstart_example_issues_completion_credential(
    capsys: pytest.CaptureFixture[str],
) -> None:
    namespace = runpy.run_path(str(EXAMPLES_DIR / "01_quickstart.py"), run_name="example")
    asyncio.run(namespace["main"]())
    output = capsys.readouterr().out

    assert "An error occurred" not in output
    assert "Created DID: did:key:z" in output
    parsed = output.split("Parsed VC:", 1)[1]
    for claim in ('"name": "Alice Smith"', '"completionDate"', '"expertiseLevel": "Beginner"'):
        assert claim in parsed
