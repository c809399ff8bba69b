"""
Service bootstrap — package re-exports.

Layers (inner to outer): data → detection → execution → orchestration.

    from devinit.core.services.bootstrap import ServiceBootstrapper
"""

# ── L0: Data ──
from devinit.core.services.bootstrap.data.constants import LOCK_PATHS  # noqa: F401

# ── L3: Detection ──
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
)

# ── L4: Execution ──
from devinit.core.services.bootstrap.execution.download import (  # noqa: F401
    DownloadPipeline,
)
from devinit.core.services.bootstrap.execution.package_install import (  # noqa: F401
    LockAwareInstaller,
)
from devinit.core.services.bootstrap.execution.platform_strategies import (  # noqa: F401
    DetachedStarter,
    LaunchdStarter,
    LinuxInstaller,
    MacInstaller,
    ManualInstaller,
    ManualStarter,
    PlatformStrategy,
    ServiceInstaller,
    ServiceStarter,
    SystemdStarter,
    VendorScriptInstaller,
    select_strategy,
)

# ── L5: Orchestration ──
from devinit.core.services.bootstrap.orchestration.bootstrapper import (  # noqa: F401
    ServiceBootstrapper,
)
