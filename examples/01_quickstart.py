#!/usr/bin/env python3
"""Example: Quickstart

Create a DID, issue a credential about it, sign it as a VC-JWT, store the
token in the DID's DWN, read it back, and parse it.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install did-quickstart
"""
from __future__ import annotations

import asyncio
from datetime import datetime, timezone

from did_quickstart import CryptoProvider, VerifiableCredential, connect


async def main() -> None:
    crypto = CryptoProvider()

    try:
        # Step 1: Connect, creating the agent and a DID on first launch
        result = await connect("your-secure-password", crypto)
        alice_did = result.did
        print(f"Created DID: {alice_did}")

        # Step 2: Fetch the bearer DID that can sign for it
        identity = await result.session.agent.identity.get(alice_did)
        print(f"Bearer DID: {identity.did.uri}")

        # Step 3: Build the credential
        vc = VerifiableCredential.create(
            type="Web5QuickstartCompletionCredential",
            issuer=alice_did,
            subject=alice_did,
            data={
                "name": "Alice Smith",
                "completionDate": datetime.now(timezone.utc).isoformat(),
                "expertiseLevel": "Beginner",
            },
        )
        print(f"Created VC: {vc.to_json()}")

        # Step 4: Sign it
        signed_vc = await vc.sign(identity.did)
        print(f"Signed VC (JWT): {signed_vc}")

        # Step 5: Store it in the DWN
        record = await result.session.dwn.records.create(
            signed_vc,
            {
                "schema": "Web5QuickstartCompletionCredential",
                "data_format": "application/vc+jwt",
                "published": True,
            },
        )
        print("Stored VC in DWN")

        # Step 6: Read it back and parse it
        read_signed_vc = await record.data.text()
        print(f"Read VC from DWN: {read_signed_vc}")

        parsed_vc = VerifiableCredential.parse_jwt(read_signed_vc)
        print(f"Parsed VC: {parsed_vc.to_json()}")
    except Exception as exc:
        print(f"An error occurred: {exc}")


if __name__ == "__main__":
    asyncio.run(main())
