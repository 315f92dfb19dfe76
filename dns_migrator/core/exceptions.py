"""
Exceptions raised by the DNS migrator.
"""


class DNSMigratorError(Exception):
    """Base class for all DNS migrator errors."""


class ConfigurationError(DNSMigratorError):
    """Configuration file or provider settings are unusable."""


class InvalidRequest(DNSMigratorError):
    """A request was rejected before any state was created."""


class RecordNotFound(DNSMigratorError):
    def __init__(self, record_id: str):
        super().__init__("Record not found")
        self.record_id = record_id


class UpdateCallFailed(DNSMigratorError):
    """The provider rejected or failed an API call."""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code


class JobNotFound(DNSMigratorError):
    def __init__(self, job_id: str):
        super().__init__(f"Migration job not found: {job_id}")
        self.job_id = job_id


class BackupNotFound(DNSMigratorError):
    def __init__(self, backup_id: str):
        super().__init__(f"Backup not found: {backup_id}")
        self.backup_id = backup_id


class StartupFailure(DNSMigratorError):
    """A migration could not begin processing its records."""


class InvalidTransition(DNSMigratorError):
    """A job or record status change violates its lifecycle."""
