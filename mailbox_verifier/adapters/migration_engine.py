"""Interface to the external migration orchestration engine.

The engine submits and runs mailbox migration jobs; this package only
needs to start a job, read its final status and errors, and clean up
the entities it created. Any implementation of ``MigrationEngine`` can
be injected, including in-memory stubs in tests.
"""

from enum import Enum
from typing import List, Optional, Protocol

from pydantic import BaseModel, Field, SecretStr


class MailboxQueueStatus(str, Enum):
    """Status of a migration job."""
    NOT_STARTED = "NotStarted"
    SUBMITTED = "Submitted"
    PROCESSING = "Processing"
    STOPPING = "Stopping"
    STOPPED = "Stopped"
    COMPLETED = "Completed"
    FAILED = "Failed"


class QueueType(str, Enum):
    """How much of the mailbox a job moves."""
    VERIFICATION = "Verification"
    TRIAL = "Trial"
    FULL = "Full"


class MailboxItemType(str, Enum):
    """Item types a job can be filtered to."""
    MAIL = "Mail"
    CALENDAR = "Calendar"
    CONTACT = "Contact"


class ProjectType(str, Enum):
    MAILBOX = "Mailbox"
    ARCHIVE = "Archive"


class ErrorSeverity(str, Enum):
    INFORMATION = "Information"
    WARNING = "Warning"
    ERROR = "Error"


class EndpointConfiguration(BaseModel):
    """Credentials the engine uses to reach one side of the migration."""
    use_administrative_credentials: bool = True
    administrative_username: str = ""
    administrative_password: SecretStr = Field(default=SecretStr(""))


class MigrationRequest(BaseModel):
    """Everything the engine needs to run one end-to-end mailbox migration."""

    engine_username: str = Field("", description="Migration engine user")
    engine_password: SecretStr = Field(default=SecretStr(""), description="Migration engine password")
    source: EndpointConfiguration = Field(default_factory=EndpointConfiguration)
    destination: EndpointConfiguration = Field(default_factory=EndpointConfiguration)
    source_connector: str = "ExchangeOnline2"
    destination_connector: str = "ExchangeOnline2"
    source_account: str = Field(..., description="Mailbox migrated from")
    destination_account: str = Field(..., description="Mailbox migrated to")
    queue_type: QueueType = QueueType.FULL
    item_types: Optional[List[MailboxItemType]] = Field(
        default_factory=lambda: [MailboxItemType.MAIL, MailboxItemType.CALENDAR, MailboxItemType.CONTACT],
        description="Item type filter, None for the engine default"
    )
    project_type: ProjectType = ProjectType.MAILBOX


class ProjectItemError(BaseModel):
    """One error reported by the engine for a job."""
    message: str
    severity: ErrorSeverity = ErrorSeverity.ERROR

    def __str__(self) -> str:
        return f"[{self.severity.value}] {self.message}"


class MigrationEngine(Protocol):
    """Capabilities the verification flows need from the migration engine."""

    async def submit_migration(self, request: MigrationRequest) -> str:
        """Run a migration job to completion and return its job id."""
        ...

    async def get_status(self, job_id: str) -> MailboxQueueStatus: ...

    async def get_errors(self, job_id: str) -> List[ProjectItemError]: ...

    async def cleanup(self) -> None:
        """Remove every engine-side entity created by this session."""
        ...
