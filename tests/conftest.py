"""Shared pytest fixtures for did-quickstart tests."""
from __future__ import annotations

import pytest

from did_quickstart.connect import AgentEnvironment
from did_quickstart.crypto.provider import CryptoProvider
from did_quickstart.did.bearer import BearerDid
from did_quickstart.did.did_key import create_did
from did_quickstart.dwn.records import DwnNode, RecordsApi


@pytest.fixture()
def crypto() -> CryptoProvider:
    """A provider with a low scrypt cost so vault tests stay fast."""
    return CryptoProvider(scrypt_n=2**10)


@pytest.fixture()
def bearer(crypto: CryptoProvider) -> BearerDid:
    return create_did(crypto)


@pytest.fixture()
def environment(crypto: CryptoProvider) -> AgentEnvironment:
    return AgentEnvironment.create(crypto)


@pytest.fixture()
def node() -> DwnNode:
    return DwnNode()


@pytest.fixture()
def records(node: DwnNode, bearer: BearerDid) -> RecordsApi:
    return RecordsApi(node, bearer)
