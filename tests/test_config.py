"""Tests for did_quickstart.config — QuickstartConfig defaults and environment loading."""
from __future__ import annotations

import datetime

from did_quickstart.config import (
    DEFAULT_CREDENTIAL_TYPE,
    DEFAULT_PASSWORD,
    VC_JWT_DATA_FORMAT,
    QuickstartConfig,
)


class TestDefaults:
    def test_defaults_reproduce_stock_quickstart(self) -> None:
        config = QuickstartConfig()
        assert config.password == DEFAULT_PASSWORD
        assert config.credential_type == DEFAULT_CREDENTIAL_TYPE
        assert config.schema_uri == DEFAULT_CREDENTIAL_TYPE
        assert config.data_format == VC_JWT_DATA_FORMAT
        assert config.published is True

    def test_claims_in_order(self) -> None:
        now = datetime.datetime(2024, 5, 6, 7, 8, 9, tzinfo=datetime.timezone.utc)
        claims = QuickstartConfig().claims(now=now)
        assert list(claims) == ["name", "completionDate", "expertiseLevel"]
        assert claims == {
            "name": "Alice Smith",
            "completionDate": "2024-05-06T07:08:09Z",
            "expertiseLevel": "Beginner",
        }

    def test_claims_without_completion_date(self) -> None:
        config = QuickstartConfig(include_completion_date=False, extra_claims={"course": "DIDs"})
        assert config.claims() == {
            "name": "Alice Smith",
            "expertiseLevel": "Beginner",
            "course": "DIDs",
        }


class TestFromEnv:
    def test_reads_prefixed_variables(self) -> None:
        config = QuickstartConfig.from_env(
            {
                "DID_QUICKSTART_PASSWORD": "from-env",
                "DID_QUICKSTART_SUBJECT_NAME": "Bob",
                "UNRELATED": "ignored",
            }
        )
        assert config.password == "from-env"
        assert config.subject_name == "Bob"
        assert config.expertise_level == "Beginner"

    def test_overrides_win_over_environment(self) -> None:
        config = QuickstartConfig.from_env({"DID_QUICKSTART_PASSWORD": "from-env"}, password="cli")
        assert config.password == "cli"

    def test_none_overrides_are_ignored(self) -> None:
        config = QuickstartConfig.from_env({"DID_QUICKSTART_PASSWORD": "from-env"}, password=None)
        assert config.password == "from-env"

    def test_empty_environment_gives_defaults(self) -> None:
        assert QuickstartConfig.from_env({}) == QuickstartConfig()
