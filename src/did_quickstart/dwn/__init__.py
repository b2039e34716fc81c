"""did_quickstart.dwn — personal record storage (decentralized web node)."""
from __future__ import annotations

from did_quickstart.dwn.records import (
    DwnApi,
    DwnNode,
    Record,
    RecordData,
    RecordDescriptor,
    RecordsApi,
    RecordsWriteMessage,
)

__all__ = [
    "DwnApi",
    "DwnNode",
    "Record",
    "RecordData",
    "RecordDescriptor",
    "RecordsApi",
    "RecordsWriteMessage",
]
