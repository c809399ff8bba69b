"""
Domain models — value types for the bootstrap core.

    from devinit.core.models import Command, ServiceState, BootstrapSettings
"""

from devinit.core.models.command import Command
from devinit.core.models.download import DownloadTask
from devinit.core.models.retry import (
    Attempt,
    BackoffPolicy,
    ExponentialBackoff,
    FixedBackoff,
    RetryResult,
)
from devinit.core.models.service import (
    DEFAULT_MODEL,
    BootstrapOutcome,
    ModelReference,
    ServiceState,
)
from devinit.core.models.settings import BootstrapSettings

__all__ = [
    "DEFAULT_MODEL",
    "Attempt",
    "BackoffPolicy",
    "BootstrapOutcome",
    "BootstrapSettings",
    "Command",
    "DownloadTask",
    "ExponentialBackoff",
    "FixedBackoff",
    "ModelReference",
    "RetryResult",
    "ServiceState",
]
