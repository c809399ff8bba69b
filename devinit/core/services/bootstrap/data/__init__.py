"""L0 Data — constants only, no I/O."""

from devinit.core.services.bootstrap.data.constants import (  # noqa: F401
    ENABLE_HINTS,
    LINUX_INSTALL_PREREQS,
    LOCK_PATHS,
    MANUAL_INSTALL_HINTS,
)
