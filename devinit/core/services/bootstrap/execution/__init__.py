"""
L4 Execution — ``__init__.py`` re-exports the side-effecting primitives.
"""

from devinit.core.services.bootstrap.execution.download import (  # noqa: F401
    DownloadPipeline,
)
from devinit.core.services.bootstrap.execution.package_install import (  # noqa: F401
    LockAwareInstaller,
    LockWaitResult,
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
