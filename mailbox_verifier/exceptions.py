"""Exception hierarchy for the mailbox migration verifier."""


class VerifierError(Exception):
    """Base class for verifier errors."""


class ConnectionError(VerifierError):
    """Raised when the Exchange connection cannot be established."""


class AuthenticationError(VerifierError):
    """Raised when credentials are missing or rejected."""


class ConfigurationError(VerifierError):
    """Raised when settings cannot describe a usable connection."""


class EnumerationError(VerifierError):
    """Raised when a paged enumeration cannot continue."""

    def __init__(self, message: str, pages_fetched: int = 0):
        super().__init__(message)
        self.pages_fetched = pages_fetched


class ItemServiceError(VerifierError):
    """Raised when a single remote item call fails."""


class FixtureError(VerifierError):
    """Raised when an expected-mailbox fixture cannot be loaded."""


class ReconciliationError(AssertionError):
    """Raised when two snapshots do not reconcile.

    Subclasses AssertionError so test runners report a failure.
    """

    def __init__(self, failures):
        self.failures = list(failures)
        super().__init__("\n".join(self.failures))


class MigrationJobError(AssertionError):
    """Raised when the migration engine reports an unexpected outcome."""

    def __init__(self, job_id: str, message: str, errors=None):
        self.job_id = job_id
        self.errors = list(errors or [])
        super().__init__(f"Migration job {job_id}: {message}")
