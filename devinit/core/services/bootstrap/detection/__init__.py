"""
L3 Detection — ``__init__.py`` re-exports all detection functions.

These functions READ system state but never WRITE.
"""

from devinit.core.services.bootstrap.detection.locks import (  # noqa: F401
    LockProbe,
    sudo_prefix,
)
from devinit.core.services.bootstrap.detection.network import (  # noqa: F401
    check_url_reachable,
    wait_for_network,
    wait_ready,
)
from devinit.core.services.bootstrap.detection.platform import (  # noqa: F401
    OSKind,
    detect_os,
)
from devinit.core.services.bootstrap.detection.service_status import (  # noqa: F401
    ServiceClient,
    launchd_job_registered,
    systemd_unit_registered,
)
