"""QuickstartWorkflow — the end-to-end credential quickstart as a driver.

Steps run strictly in order, each consuming the previous step's output:

1. ``connect``            open an identity session with the password
2. ``get_identity``       fetch the bearer DID for the connected identifier
3. ``create_credential``  build a credential about that identifier
4. ``sign_credential``    sign it into a VC-JWT
5. ``store_record``       write the VC-JWT to the identity's DWN
6. ``read_record``        read the VC-JWT back through the record handle
7. ``parse_credential``   parse the VC-JWT back into a credential

Each step produces a :class:`StepResult`. The first failed step ends the
run; no later step is started and nothing done by earlier steps is undone.
Only :class:`~did_quickstart.errors.QuickstartError` failures are captured
in a result. Anything else propagates to the caller.
"""
from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from did_quickstart.config import QuickstartConfig
from did_quickstart.connect import AgentEnvironment, ConnectResult, connect
from did_quickstart.credentials.credential import VerifiableCredential
from did_quickstart.crypto.provider import CryptoProvider
from did_quickstart.did.bearer import BearerDid
from did_quickstart.dwn.records import Record
from did_quickstart.errors import QuickstartError

logger = logging.getLogger(__name__)


class WorkflowStep(str, Enum):
    """The ordered steps of a quickstart run."""

    CONNECT = "connect"
    GET_IDENTITY = "get_identity"
    CREATE_CREDENTIAL = "create_credential"
    SIGN_CREDENTIAL = "sign_credential"
    STORE_RECORD = "store_record"
    READ_RECORD = "read_record"
    PARSE_CREDENTIAL = "parse_credential"


@dataclass(frozen=True)
class StepResult:
    """Outcome of a single workflow step.

    Parameters
    ----------
    step:
        Which step ran.
    ok:
        ``True`` if the step completed.
    value:
        The step's output when ``ok``.
    error:
        The captured error when not ``ok``.
    """

    step: WorkflowStep
    ok: bool
    value: Any = None
    error: QuickstartError | None = None

    @classmethod
    def success(cls, step: WorkflowStep, value: Any) -> "StepResult":
        return cls(step=step, ok=True, value=value)

    @classmethod
    def failure(cls, step: WorkflowStep, error: QuickstartError) -> "StepResult":
        return cls(step=step, ok=False, error=error)


class WorkflowError(QuickstartError):
    """Raised by :meth:`QuickstartOutcome.raise_for_failure`."""

    def __init__(self, step: WorkflowStep, cause: QuickstartError) -> None:
        super().__init__(f"Step {step.value!r} failed: {cause}")
        self.step = step
        self.cause = cause


@dataclass
class QuickstartOutcome:
    """Results of a run, in execution order."""

    steps: list[StepResult] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return len(self.steps) == len(WorkflowStep) and all(r.ok for r in self.steps)

    @property
    def failed_step(self) -> WorkflowStep | None:
        for result in self.steps:
            if not result.ok:
                return result.step
        return None

    @property
    def error(self) -> QuickstartError | None:
        for result in self.steps:
            if not result.ok:
                return result.error
        return None

    def value_of(self, step: WorkflowStep) -> Any:
        """Return the output of *step*, or ``None`` if it did not complete."""
        for result in self.steps:
            if result.step is step and result.ok:
                return result.value
        return None

    @property
    def did(self) -> str | None:
        connected: ConnectResult | None = self.value_of(WorkflowStep.CONNECT)
        return connected.did if connected else None

    @property
    def credential(self) -> VerifiableCredential | None:
        return self.value_of(WorkflowStep.CREATE_CREDENTIAL)

    @property
    def signed_vc(self) -> str | None:
        return self.value_of(WorkflowStep.SIGN_CREDENTIAL)

    @property
    def record(self) -> Record | None:
        return self.value_of(WorkflowStep.STORE_RECORD)

    @property
    def read_vc(self) -> str | None:
        return self.value_of(WorkflowStep.READ_RECORD)

    @property
    def parsed_vc(self) -> VerifiableCredential | None:
        return self.value_of(WorkflowStep.PARSE_CREDENTIAL)

    def raise_for_failure(self) -> None:
        """Raise :class:`WorkflowError` if any step failed."""
        for result in self.steps:
            if not result.ok and result.error is not None:
                raise WorkflowError(result.step, result.error)


Reporter = Callable[[WorkflowStep, Any], None]


class QuickstartWorkflow:
    """Drives one quickstart run.

    Parameters
    ----------
    crypto:
        Cryptographic provider handed to every SDK call that needs one.
    config:
        Password, credential type, and claims. Defaults reproduce the stock
        quickstart.
    environment:
        Agent environment to connect to. A fresh one per run when omitted.
    reporter:
        Called as ``reporter(step, value)`` after each completed step.

    Example
    -------
    ::

        workflow = QuickstartWorkflow(CryptoProvider(), QuickstartConfig(password="pw123"))
        outcome = await workflow.run()
        assert outcome.parsed_vc.subject == outcome.did
    """

    def __init__(
        self,
        crypto: CryptoProvider,
        config: QuickstartConfig | None = None,
        environment: AgentEnvironment | None = None,
        reporter: Reporter | None = None,
    ) -> None:
        self._crypto = crypto
        self._config = config or QuickstartConfig()
        self._environment = environment
        self._reporter = reporter

    @property
    def config(self) -> QuickstartConfig:
        return self._config

    async def run(self) -> QuickstartOutcome:
        """Execute every step in order, stopping at the first failure."""
        outcome = QuickstartOutcome()
        actions: list[tuple[WorkflowStep, Callable[[QuickstartOutcome], Awaitable[Any]]]] = [
            (WorkflowStep.CONNECT, self._connect),
            (WorkflowStep.GET_IDENTITY, self._get_identity),
            (WorkflowStep.CREATE_CREDENTIAL, self._create_credential),
            (WorkflowStep.SIGN_CREDENTIAL, self._sign_credential),
            (WorkflowStep.STORE_RECORD, self._store_record),
            (WorkflowStep.READ_RECORD, self._read_record),
            (WorkflowStep.PARSE_CREDENTIAL, self._parse_credential),
        ]
        for step, action in actions:
            try:
                value = await action(outcome)
            except QuickstartError as exc:
                logger.warning("Quickstart step %s failed: %s", step.value, exc)
                outcome.steps.append(StepResult.failure(step, exc))
                break
            logger.debug("Quickstart step %s completed", step.value)
            outcome.steps.append(StepResult.success(step, value))
            if self._reporter is not None:
                self._reporter(step, value)
        return outcome

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    async def _connect(self, outcome: QuickstartOutcome) -> ConnectResult:
        return await connect(self._config.password, self._crypto, self._environment)

    async def _get_identity(self, outcome: QuickstartOutcome) -> BearerDid:
        connected: ConnectResult = outcome.value_of(WorkflowStep.CONNECT)
        identity = await connected.session.agent.identity.get(connected.did)
        return identity.did

    async def _create_credential(self, outcome: QuickstartOutcome) -> VerifiableCredential:
        did = outcome.did
        return VerifiableCredential.create(
            type=self._config.credential_type,
            issuer=did,
            subject=did,
            data=self._config.claims(),
        )

    async def _sign_credential(self, outcome: QuickstartOutcome) -> str:
        bearer: BearerDid = outcome.value_of(WorkflowStep.GET_IDENTITY)
        return await outcome.credential.sign(bearer)

    async def _store_record(self, outcome: QuickstartOutcome) -> Record:
        connected: ConnectResult = outcome.value_of(WorkflowStep.CONNECT)
        return await connected.session.dwn.records.create(
            outcome.signed_vc,
            {
                "schema": self._config.schema_uri,
                "data_format": self._config.data_format,
                "published": self._config.published,
            },
        )

    async def _read_record(self, outcome: QuickstartOutcome) -> str:
        return await outcome.record.data.text()

    async def _parse_credential(self, outcome: QuickstartOutcome) -> VerifiableCredential:
        return VerifiableCredential.parse_jwt(outcome.read_vc)


__all__ = [
    "QuickstartOutcome",
    "QuickstartWorkflow",
    "Reporter",
    "StepResult",
    "WorkflowError",
    "WorkflowStep",
]
