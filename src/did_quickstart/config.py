"""Configuration for the quickstart workflow.

Every value has a default that reproduces the stock quickstart, so running
with no configuration at all works. Values can be overridden by keyword,
from the environment with :meth:`QuickstartConfig.from_env`, or from the
command line.

Environment Variables:
    DID_QUICKSTART_PASSWORD: Vault password (default: your-secure-password)
    DID_QUICKSTART_CREDENTIAL_TYPE: Credential type and record schema
    DID_QUICKSTART_SUBJECT_NAME: ``name`` claim (default: Alice Smith)
    DID_QUICKSTART_EXPERTISE_LEVEL: ``expertiseLevel`` claim (default: Beginner)
"""
from __future__ import annotations

import os
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field

ENV_PREFIX: str = "DID_QUICKSTART_"

DEFAULT_PASSWORD: str = "your-secure-password"
DEFAULT_CREDENTIAL_TYPE: str = "Web5QuickstartCompletionCredential"
VC_JWT_DATA_FORMAT: str = "application/vc+jwt"


class QuickstartConfig(BaseModel):
    """Inputs of a quickstart run.

    Parameters
    ----------
    password:
        Secret gating the identity vault. Used opaquely.
    credential_type:
        Type of the issued credential; also used as the record schema.
    data_format:
        Content type of the stored record.
    published:
        Whether the stored record is publicly readable.
    subject_name:
        Value of the ``name`` claim.
    expertise_level:
        Value of the ``expertiseLevel`` claim.
    extra_claims:
        Additional claims merged into the credential subject.
    include_completion_date:
        Add a ``completionDate`` claim with the current UTC time.
    """

    model_config = {"frozen": True}

    password: str = DEFAULT_PASSWORD
    credential_type: str = DEFAULT_CREDENTIAL_TYPE
    data_format: str = VC_JWT_DATA_FORMAT
    published: bool = True
    subject_name: str = "Alice Smith"
    expertise_level: str = "Beginner"
    extra_claims: dict[str, Any] = Field(default_factory=dict)
    include_completion_date: bool = True

    @property
    def schema_uri(self) -> str:
        return self.credential_type

    def claims(self, now: datetime | None = None) -> dict[str, Any]:
        """Build the credential claims for this run."""
        claims: dict[str, Any] = {"name": self.subject_name}
        if self.include_completion_date:
            moment = now or datetime.now(timezone.utc)
            claims["completionDate"] = moment.strftime("%Y-%m-%dT%H:%M:%SZ")
        claims["expertiseLevel"] = self.expertise_level
        claims.update(self.extra_claims)
        return claims

    @classmethod
    def from_env(
        cls, environ: Mapping[str, str] | None = None, **overrides: Any
    ) -> "QuickstartConfig":
        """Build a config from ``DID_QUICKSTART_*`` variables.

        Keyword *overrides* take precedence over the environment. ``None``
        overrides are ignored so optional CLI flags can be passed straight
        through.
        """
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        for name in ("password", "credential_type", "subject_name", "expertise_level"):
            raw = env.get(f"{ENV_PREFIX}{name.upper()}")
            if raw is not None:
                values[name] = raw
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


__all__ = [
    "DEFAULT_CREDENTIAL_TYPE",
    "DEFAULT_PASSWORD",
    "ENV_PREFIX",
    "QuickstartConfig",
    "VC_JWT_DATA_FORMAT",
]
