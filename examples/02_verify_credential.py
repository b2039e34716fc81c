#!/usr/bin/env python3
"""Example: Verify a credential and reconnect to the same agent

Issues a VC-JWT, verifies its signature against the issuer's did:key, then
reconnects to the same agent environment: once with the right password and
once with a wrong one.

Usage:
    python examples/02_verify_credential.py
"""
from __future__ import annotations

import asyncio

from did_quickstart import (
    AgentEnvironment,
    CryptoProvider,
    InvalidPasswordError,
    VerifiableCredential,
    connect,
)


async def main() -> None:
    crypto = CryptoProvider()
    environment = AgentEnvironment.create(crypto)

    result = await connect("pw123", crypto, environment)
    identity = await result.session.agent.identity.get(result.did)

    vc = VerifiableCredential.create(
        type="Web5QuickstartCompletionCredential",
        issuer=result.did,
        subject=result.did,
        data={"name": "Alice Smith"},
    )
    vc_jwt = await vc.sign(identity.did)

    verified = VerifiableCredential.verify(vc_jwt)
    print(f"Verified credential {verified.id} issued by {verified.issuer}")

    again = await connect("pw123", crypto, environment)
    print(f"Reconnected as the same DID: {again.did == result.did}")

    try:
        await connect("not-the-password", crypto, environment)
    except InvalidPasswordError as exc:
        print(f"Wrong password rejected: {exc}")


if __name__ == "__main__":
    asyncio.run(main())
