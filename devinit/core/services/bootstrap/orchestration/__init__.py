"""L5 Orchestration — composes detection and execution into one run."""

from devinit.core.services.bootstrap.orchestration.bootstrapper import (  # noqa: F401
    ServiceBootstrapper,
)
