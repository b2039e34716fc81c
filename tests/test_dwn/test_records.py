"""Tests for did_quickstart.dwn.records — signed record writes and reads."""
from __future__ import annotations

import hashlib

import pytest

from did_quickstart.credentials.jwt import sign_jwt
from did_quickstart.crypto.provider import CryptoProvider
from did_quickstart.did.bearer import BearerDid
from did_quickstart.did.did_key import create_did
from did_quickstart.dwn.records import (
    DwnNode,
    Record,
    RecordDescriptor,
    RecordsApi,
    RecordsWriteMessage,
)
from did_quickstart.errors import (
    EnvironmentUnavailableError,
    RecordNotFoundError,
    StorageError,
)


class TestRecordsCreate:
    @pytest.mark.asyncio
    async def test_create_returns_record_with_descriptor(
        self, records: RecordsApi, bearer: BearerDid
    ) -> None:
        record = await records.create(
            "header.payload.signature",
            {"schema": "QuickstartCredential", "data_format": "application/vc+jwt", "published": True},
        )
        assert isinstance(record, Record)
        assert record.author == bearer.uri
        assert record.schema == "QuickstartCredential"
        assert record.data_format == "application/vc+jwt"
        assert record.published is True
        assert record.record_id.startswith("b")

    @pytest.mark.asyncio
    async def test_text_round_trip(self, records: RecordsApi) -> None:
        record = await records.create("hello", {"schema": "greeting"})
        assert await record.data.text() == "hello"

    @pytest.mark.asyncio
    async def test_camel_case_data_format_is_accepted(self, records: RecordsApi) -> None:
        record = await records.create("x", {"dataFormat": "text/x-custom"})
        assert record.data_format == "text/x-custom"

    @pytest.mark.parametrize(
        "data, expected_format",
        [
            (b"\x00\x01", "application/octet-stream"),
            ("text", "text/plain"),
            ({"a": 1}, "application/json"),
            ([1, 2], "application/json"),
        ],
    )
    @pytest.mark.asyncio
    async def test_default_data_format_follows_type(
        self, records: RecordsApi, data: object, expected_format: str
    ) -> None:
        record = await records.create(data)
        assert record.data_format == expected_format
        assert record.published is False

    @pytest.mark.asyncio
    async def test_json_payload_reads_back(self, records: RecordsApi) -> None:
        record = await records.create({"a": [1, 2]})
        assert await record.data.json() == {"a": [1, 2]}

    @pytest.mark.asyncio
    async def test_bytes_payload_reads_back_unchanged(self, records: RecordsApi) -> None:
        record = await records.create(b"\x00\xff\x10")
        assert await record.data.bytes() == b"\x00\xff\x10"

    @pytest.mark.asyncio
    async def test_text_of_binary_payload_raises_storage_error(self, records: RecordsApi) -> None:
        record = await records.create(b"\xff\xfe")
        with pytest.raises(StorageError, match="not UTF-8"):
            await record.data.text()

    @pytest.mark.parametrize("published", ["false", 0, 1, None])
    @pytest.mark.asyncio
    async def test_non_bool_published_raises(
        self, records: RecordsApi, published: object
    ) -> None:
        with pytest.raises(StorageError, match="'published' flag must be a bool"):
            await records.create("x", {"published": published})

    @pytest.mark.parametrize("key", ["data_format", "dataFormat"])
    @pytest.mark.asyncio
    async def test_non_string_data_format_raises(self, records: RecordsApi, key: str) -> None:
        with pytest.raises(StorageError, match="data format must be a string"):
            await records.create("x", {key: 7})

    @pytest.mark.asyncio
    async def test_non_string_schema_raises(self, records: RecordsApi) -> None:
        with pytest.raises(StorageError, match="schema must be a string"):
            await records.create("x", {"schema": 7})

    @pytest.mark.asyncio
    async def test_same_data_twice_gives_distinct_records(self, records: RecordsApi) -> None:
        first = await records.create("same", {"schema": "s"})
        second = await records.create("same", {"schema": "s"})
        assert first.record_id != second.record_id
        assert len(await records.query("s")) == 2

    @pytest.mark.asyncio
    async def test_unknown_option_raises(self, records: RecordsApi) -> None:
        with pytest.raises(StorageError, match="Unknown record message options"):
            await records.create("x", {"protocol": "https://example.com"})

    @pytest.mark.asyncio
    async def test_unsupported_data_type_raises(self, records: RecordsApi) -> None:
        with pytest.raises(StorageError, match="Unsupported record data type"):
            await records.create(42)

    @pytest.mark.asyncio
    async def test_non_serializable_json_raises(self, records: RecordsApi) -> None:
        with pytest.raises(StorageError, match="not JSON-serializable"):
            await records.create({"x": object()})

    @pytest.mark.asyncio
    async def test_stopped_node_raises(self, records: RecordsApi, node: DwnNode) -> None:
        node.stop()
        with pytest.raises(EnvironmentUnavailableError):
            await records.create("x")
        node.start()
        assert await records.create("x")


class TestRecordsReadQueryDelete:
    @pytest.mark.asyncio
    async def test_read_by_id(self, records: RecordsApi) -> None:
        created = await records.create("hello")
        fetched = await records.read(created.record_id)
        assert fetched == created

    @pytest.mark.asyncio
    async def test_read_unknown_raises(self, records: RecordsApi) -> None:
        with pytest.raises(RecordNotFoundError) as exc_info:
            await records.read("bunknown")
        assert exc_info.value.record_id == "bunknown"

    @pytest.mark.asyncio
    async def test_query_filters_by_schema(self, records: RecordsApi) -> None:
        a = await records.create("a", {"schema": "one"})
        await records.create("b", {"schema": "two"})
        assert [r.record_id for r in await records.query("one")] == [a.record_id]
        assert len(await records.query()) == 2

    @pytest.mark.asyncio
    async def test_records_are_scoped_to_tenant(
        self, node: DwnNode, records: RecordsApi, crypto: CryptoProvider
    ) -> None:
        created = await records.create("mine")
        other = RecordsApi(node, create_did(crypto))
        assert await other.query() == []
        with pytest.raises(RecordNotFoundError):
            await other.read(created.record_id)

    @pytest.mark.asyncio
    async def test_delete_removes_record(self, records: RecordsApi) -> None:
        created = await records.create("gone")
        await records.delete(created.record_id)
        with pytest.raises(RecordNotFoundError):
            await records.read(created.record_id)
        with pytest.raises(RecordNotFoundError):
            await records.delete(created.record_id)


class TestNodeAuthorization:
    def _message(self, bearer: BearerDid, payload: bytes, **overrides: object) -> RecordsWriteMessage:
        descriptor = RecordDescriptor(
            schema="s",
            data_format="text/plain",
            date_created="2024-01-01T00:00:00+00:00",
            data_digest=hashlib.sha256(payload).hexdigest(),
            data_size=len(payload),
        )
        authorization = sign_jwt(
            bearer,
            {"recordId": "brecord", "descriptorDigest": descriptor.digest()},
            typ="dwn+jwt",
        )
        fields = {
            "record_id": "brecord",
            "author": bearer.uri,
            "descriptor": descriptor,
            "authorization": authorization,
        }
        fields.update(overrides)
        return RecordsWriteMessage(**fields)

    @pytest.mark.asyncio
    async def test_well_formed_message_is_accepted(self, node: DwnNode, bearer: BearerDid) -> None:
        record = await node.write(bearer.uri, self._message(bearer, b"hi"), b"hi")
        assert record.record_id == "brecord"

    @pytest.mark.asyncio
    async def test_write_to_other_tenant_is_rejected(
        self, node: DwnNode, bearer: BearerDid, crypto: CryptoProvider
    ) -> None:
        with pytest.raises(StorageError, match="may not write"):
            await node.write(create_did(crypto).uri, self._message(bearer, b"hi"), b"hi")

    @pytest.mark.asyncio
    async def test_authorization_by_other_key_is_rejected(
        self, node: DwnNode, bearer: BearerDid, crypto: CryptoProvider
    ) -> None:
        forged = sign_jwt(create_did(crypto), {"recordId": "brecord"})
        message = self._message(bearer, b"hi", authorization=forged)
        with pytest.raises(StorageError, match="signed by"):
            await node.write(bearer.uri, message, b"hi")

    @pytest.mark.asyncio
    async def test_garbage_authorization_is_rejected(self, node: DwnNode, bearer: BearerDid) -> None:
        message = self._message(bearer, b"hi", authorization="not.a.jws")
        with pytest.raises(StorageError, match="authorization rejected"):
            await node.write(bearer.uri, message, b"hi")

    @pytest.mark.asyncio
    async def test_record_id_mismatch_is_rejected(self, node: DwnNode, bearer: BearerDid) -> None:
        message = self._message(bearer, b"hi", record_id="bother")
        with pytest.raises(StorageError, match="record ID"):
            await node.write(bearer.uri, message, b"hi")

    @pytest.mark.asyncio
    async def test_modified_descriptor_is_rejected(self, node: DwnNode, bearer: BearerDid) -> None:
        message = self._message(bearer, b"hi")
        tampered = message.model_copy(
            update={"descriptor": message.descriptor.model_copy(update={"published": True})}
        )
        with pytest.raises(StorageError, match="modified after signing"):
            await node.write(bearer.uri, tampered, b"hi")

    @pytest.mark.asyncio
    async def test_payload_digest_mismatch_is_rejected(self, node: DwnNode, bearer: BearerDid) -> None:
        with pytest.raises(StorageError, match="does not match the descriptor digest"):
            await node.write(bearer.uri, self._message(bearer, b"hi"), b"bye")
