"""CLI entry point for did-quickstart.

Invoked as::

    did-quickstart [OPTIONS] COMMAND [ARGS]...

Commands
--------
run       Run the quickstart: DID, credential, sign, store, read, parse
resolve   Print the DID document for a did:key identifier
verify    Verify a VC-JWT and print the credential it carries
version   Show version information
"""
from __future__ import annotations

import asyncio
import logging
import sys
from typing import Any

import click
from rich.console import Console
from rich.markup import escape

from did_quickstart.workflow import WorkflowStep

console = Console(soft_wrap=True, emoji=False)
logger = logging.getLogger(__name__)

_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


# ------------------------------------------------------------------
# Root group
# ------------------------------------------------------------------


@click.group()
@click.version_option(package_name="did-quickstart")
def cli() -> None:
    """Decentralized identity quickstart: DIDs, verifiable credentials, DWN records"""


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from did_quickstart import __version__

    console.print(f"[bold]did-quickstart[/bold] v{__version__}")


# ------------------------------------------------------------------
# run
# ------------------------------------------------------------------


@cli.command(name="run")
@click.option(
    "--password",
    "-p",
    default=None,
    help="Vault password. Falls back to $DID_QUICKSTART_PASSWORD, then the built-in default.",
)
@click.option("--name", "subject_name", default=None, help="Value of the 'name' claim.")
@click.option("--expertise-level", default=None, help="Value of the 'expertiseLevel' claim.")
@click.option(
    "--log-level",
    type=click.Choice(_LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
)
def run_command(
    password: str | None,
    subject_name: str | None,
    expertise_level: str | None,
    log_level: str,
) -> None:
    """Create a DID, issue and sign a credential, store it, and read it back."""
    from did_quickstart.config import QuickstartConfig
    from did_quickstart.crypto.provider import CryptoProvider
    from did_quickstart.workflow import QuickstartWorkflow

    logging.basicConfig(level=getattr(logging, log_level.upper()))

    try:
        config = QuickstartConfig.from_env(
            password=password,
            subject_name=subject_name,
            expertise_level=expertise_level,
        )
        workflow = QuickstartWorkflow(CryptoProvider(), config, reporter=_report_step)
        outcome = asyncio.run(workflow.run())
        outcome.raise_for_failure()
    except Exception as exc:
        logger.debug("Quickstart aborted", exc_info=True)
        console.print(f"[red]An error occurred:[/red] {escape(str(exc))}")
        return

    console.print("\n[green]Quickstart complete.[/green]")


def _report_step(step: WorkflowStep, value: Any) -> None:
    if step is WorkflowStep.CONNECT:
        console.print(f"Created DID: {escape(value.did)}")
    elif step is WorkflowStep.GET_IDENTITY:
        console.print(f"Bearer DID: {escape(value.uri)}")
    elif step is WorkflowStep.CREATE_CREDENTIAL:
        console.print("Created VC:")
        console.print_json(value.to_json())
    elif step is WorkflowStep.SIGN_CREDENTIAL:
        console.print(f"Signed VC (JWT): {escape(value)}")
    elif step is WorkflowStep.STORE_RECORD:
        console.print(f"Stored VC in DWN (record {escape(value.record_id)})")
    elif step is WorkflowStep.READ_RECORD:
        console.print(f"Read VC from DWN: {escape(value)}")
    elif step is WorkflowStep.PARSE_CREDENTIAL:
        console.print("Parsed VC:")
        console.print_json(value.to_json())


# ------------------------------------------------------------------
# resolve
# ------------------------------------------------------------------


@cli.command(name="resolve")
@click.argument("did")
def resolve_command(did: str) -> None:
    """Print the DID document for DID."""
    from did_quickstart.did.did_key import resolve_did
    from did_quickstart.errors import DidResolutionError

    try:
        document = resolve_did(did)
    except DidResolutionError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        sys.exit(1)
    console.print_json(data=document.to_dict())


# ------------------------------------------------------------------
# verify
# ------------------------------------------------------------------


@cli.command(name="verify")
@click.argument("vc_jwt")
def verify_command(vc_jwt: str) -> None:
    """Verify VC_JWT and print the credential it carries."""
    from did_quickstart.credentials.credential import VerifiableCredential
    from did_quickstart.errors import CredentialVerificationError

    try:
        credential = VerifiableCredential.verify(vc_jwt)
    except CredentialVerificationError as exc:
        console.print(f"[red]INVALID[/red] {escape(str(exc))}")
        sys.exit(1)

    console.print(f"[green]VALID[/green] credential issued by {escape(credential.issuer)}")
    console.print_json(credential.to_json())


if __name__ == "__main__":
    cli()
