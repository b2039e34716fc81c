"""DWN records — a personal data store keyed by the owner's DID.

A :class:`DwnNode` holds one record store per tenant DID. Writes go through
:class:`RecordsApi`, which builds a record descriptor, signs it as an
authorization JWS with the author's bearer DID, and hands it to the node.
The node refuses any write whose authorization does not verify against the
author's ``did:key`` or whose data digest does not match the descriptor.

Record IDs are derived from the author, the descriptor, and a random entry
nonce. Writing identical data twice yields two distinct records.
"""
from __future__ import annotations

import base64
import datetime
import hashlib
import json
import logging
import secrets
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, Field

from did_quickstart.credentials.jwt import sign_jwt, verify_jwt
from did_quickstart.did.bearer import BearerDid
from did_quickstart.errors import (
    EnvironmentUnavailableError,
    RecordNotFoundError,
    StorageError,
)

logger = logging.getLogger(__name__)

_MESSAGE_KEYS: frozenset[str] = frozenset({"schema", "data_format", "dataFormat", "published"})


# ------------------------------------------------------------------
# Messages
# ------------------------------------------------------------------


class RecordDescriptor(BaseModel):
    """Metadata describing a record's content."""

    schema_uri: str = Field(alias="schema")
    data_format: str
    published: bool = False
    date_created: str
    data_digest: str
    data_size: int

    model_config = {"populate_by_name": True}

    def digest(self) -> str:
        canonical = json.dumps(self.model_dump(by_alias=True), sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


class RecordsWriteMessage(BaseModel):
    """A signed request to store a record in the author's DWN."""

    record_id: str
    author: str
    descriptor: RecordDescriptor
    authorization: str


# ------------------------------------------------------------------
# Record handle
# ------------------------------------------------------------------


class RecordData:
    """Accessor for a record's payload."""

    def __init__(self, payload: bytes) -> None:
        self._payload = payload

    async def bytes(self) -> bytes:
        return self._payload

    async def text(self) -> str:
        try:
            return self._payload.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise StorageError(f"Record data is not UTF-8 text: {exc}") from exc

    async def json(self) -> Any:
        return json.loads(self._payload)


@dataclass(frozen=True)
class Record:
    """A stored record as returned by :class:`RecordsApi`.

    Parameters
    ----------
    record_id:
        Content-derived identifier.
    author:
        DID of the author (and tenant).
    descriptor:
        Schema, data format, visibility, and data digest.
    payload:
        The raw record bytes.
    """

    record_id: str
    author: str
    descriptor: RecordDescriptor
    payload: bytes

    @property
    def data(self) -> RecordData:
        return RecordData(self.payload)

    @property
    def schema(self) -> str:
        return self.descriptor.schema_uri

    @property
    def data_format(self) -> str:
        return self.descriptor.data_format

    @property
    def published(self) -> bool:
        return self.descriptor.published

    @property
    def date_created(self) -> str:
        return self.descriptor.date_created

    def to_dict(self) -> dict[str, Any]:
        """Serialize record metadata. The payload is omitted."""
        return {
            "record_id": self.record_id,
            "author": self.author,
            **self.descriptor.model_dump(by_alias=True),
        }


# ------------------------------------------------------------------
# DwnNode
# ------------------------------------------------------------------


class DwnNode:
    """In-memory DWN message store, one record map per tenant DID.

    Example
    -------
    ::

        node = DwnNode()
        records = RecordsApi(node, bearer)
        record = await records.create("hello", {"schema": "greeting"})
        assert await record.data.text() == "hello"
    """

    def __init__(self) -> None:
        self._tenants: dict[str, dict[str, Record]] = {}
        self._running = True

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self) -> None:
        self._running = True

    def stop(self) -> None:
        self._running = False

    # ------------------------------------------------------------------
    # Message handling
    # ------------------------------------------------------------------

    async def write(self, tenant: str, message: RecordsWriteMessage, payload: bytes) -> Record:
        """Validate and store a records-write message.

        Raises
        ------
        StorageError
            If the authorization or data digest does not check out.
        EnvironmentUnavailableError
            If the node is stopped.
        """
        self._require_running()
        self._check_authorization(tenant, message, payload)

        record = Record(
            record_id=message.record_id,
            author=message.author,
            descriptor=message.descriptor,
            payload=payload,
        )
        self._tenants.setdefault(tenant, {})[record.record_id] = record
        logger.info(
            "Stored record %s for %s (schema=%s, %d bytes)",
            record.record_id,
            tenant,
            record.schema,
            len(payload),
        )
        return record

    async def read(self, tenant: str, record_id: str) -> Record:
        self._require_running()
        record = self._tenants.get(tenant, {}).get(record_id)
        if record is None:
            raise RecordNotFoundError(record_id)
        logger.debug("Read record %s for %s", record_id, tenant)
        return record

    async def query(self, tenant: str, schema: str | None = None) -> list[Record]:
        """Return the tenant's records, oldest first, optionally filtered by schema."""
        self._require_running()
        records = list(self._tenants.get(tenant, {}).values())
        if schema is not None:
            records = [r for r in records if r.schema == schema]
        return records

    async def delete(self, tenant: str, record_id: str) -> None:
        self._require_running()
        store = self._tenants.get(tenant, {})
        if record_id not in store:
            raise RecordNotFoundError(record_id)
        del store[record_id]
        logger.info("Deleted record %s for %s", record_id, tenant)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _require_running(self) -> None:
        if not self._running:
            raise EnvironmentUnavailableError("DWN node is not running.")

    def _check_authorization(
        self, tenant: str, message: RecordsWriteMessage, payload: bytes
    ) -> None:
        if message.author != tenant:
            raise StorageError(
                f"Author {message.author!r} may not write to the DWN of {tenant!r}."
            )
        try:
            decoded = verify_jwt(message.authorization)
        except ValueError as exc:
            raise StorageError(f"Record authorization rejected: {exc}") from exc

        signer = str(decoded.header.get("kid", "")).split("#", 1)[0]
        if signer != message.author:
            raise StorageError(
                f"Record authorization signed by {signer!r}, expected {message.author!r}."
            )
        if decoded.payload.get("recordId") != message.record_id:
            raise StorageError("Record authorization does not cover this record ID.")
        if decoded.payload.get("descriptorDigest") != message.descriptor.digest():
            raise StorageError("Record descriptor was modified after signing.")
        if hashlib.sha256(payload).hexdigest() != message.descriptor.data_digest:
            raise StorageError("Record data does not match the descriptor digest.")


# ------------------------------------------------------------------
# RecordsApi
# ------------------------------------------------------------------


class RecordsApi:
    """Record operations on behalf of one author DID.

    Parameters
    ----------
    node:
        The DWN node holding the author's records.
    author:
        Bearer DID that signs every write. Also the tenant.
    """

    def __init__(self, node: DwnNode, author: BearerDid) -> None:
        self._node = node
        self._author = author

    async def create(self, data: Any, message: dict[str, Any] | None = None) -> Record:
        """Create a record holding *data*.

        Parameters
        ----------
        data:
            ``str``, ``bytes``, or a JSON-serializable ``dict``/``list``.
        message:
            Record options: ``schema``, ``data_format`` (or ``dataFormat``),
            and ``published``. The data format defaults from the type of
            *data*.

        Raises
        ------
        StorageError
            If *data* cannot be encoded or the options are invalid.
        """
        options = dict(message or {})
        unknown = set(options) - _MESSAGE_KEYS
        if unknown:
            raise StorageError(f"Unknown record message options: {sorted(unknown)!r}")

        payload, default_format = _encode_payload(data)
        data_format = options.get("data_format") or options.get("dataFormat") or default_format
        if not isinstance(data_format, str):
            raise StorageError(f"Record data format must be a string, got {data_format!r}.")
        schema = options.get("schema", "")
        if not isinstance(schema, str):
            raise StorageError(f"Record schema must be a string, got {schema!r}.")
        published = options.get("published", False)
        if not isinstance(published, bool):
            raise StorageError(f"Record 'published' flag must be a bool, got {published!r}.")

        descriptor = RecordDescriptor(
            schema=schema,
            data_format=data_format,
            published=published,
            date_created=datetime.datetime.now(datetime.timezone.utc).isoformat(),
            data_digest=hashlib.sha256(payload).hexdigest(),
            data_size=len(payload),
        )
        record_id = _record_id(self._author.uri, descriptor)
        authorization = sign_jwt(
            self._author,
            {"recordId": record_id, "descriptorDigest": descriptor.digest()},
            typ="dwn+jwt",
        )
        write = RecordsWriteMessage(
            record_id=record_id,
            author=self._author.uri,
            descriptor=descriptor,
            authorization=authorization,
        )
        return await self._node.write(self._author.uri, write, payload)

    async def read(self, record_id: str) -> Record:
        return await self._node.read(self._author.uri, record_id)

    async def query(self, schema: str | None = None) -> list[Record]:
        return await self._node.query(self._author.uri, schema=schema)

    async def delete(self, record_id: str) -> None:
        await self._node.delete(self._author.uri, record_id)


class DwnApi:
    """Namespace grouping the DWN interfaces available to a session."""

    def __init__(self, node: DwnNode, author: BearerDid) -> None:
        self.records = RecordsApi(node, author)


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------


def _encode_payload(data: Any) -> tuple[bytes, str]:
    if isinstance(data, bytes):
        return data, "application/octet-stream"
    if isinstance(data, str):
        return data.encode("utf-8"), "text/plain"
    if isinstance(data, (dict, list)):
        try:
            return json.dumps(data).encode("utf-8"), "application/json"
        except (TypeError, ValueError) as exc:
            raise StorageError(f"Record data is not JSON-serializable: {exc}") from exc
    raise StorageError(f"Unsupported record data type {type(data).__name__!r}.")


def _record_id(author: str, descriptor: RecordDescriptor) -> str:
    entry = {
        "author": author,
        "descriptorDigest": descriptor.digest(),
        "nonce": secrets.token_hex(16),
    }
    digest = hashlib.sha256(json.dumps(entry, sort_keys=True).encode("utf-8")).digest()
    return "b" + base64.b32encode(digest).decode("ascii").lower().rstrip("=")


__all__ = [
    "DwnApi",
    "DwnNode",
    "Record",
    "RecordData",
    "RecordDescriptor",
    "RecordsApi",
    "RecordsWriteMessage",
]
