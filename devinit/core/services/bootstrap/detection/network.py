"""
L3 Detection — network reachability and readiness polling.

``wait_ready`` is the one polling primitive: give it any boolean probe
and it keeps asking until the probe says yes or the time budget runs
out. Generic connectivity and service readiness are both just probes.
"""

from __future__ import annotations

import logging
import math
import time
import urllib.error
import urllib.request
from collections.abc import Callable
from typing import Any

from devinit.core.observability.reporter import Reporter

logger = logging.getLogger(__name__)

USER_AGENT = "devinit/1.0"


def check_url_reachable(url: str, timeout: float = 5) -> dict[str, Any]:
    """Probe a URL with a GET.

    Returns::

        {"reachable": True, "url": "https://...", "status": 200, "latency_ms": 42}
        or
        {"reachable": False, "url": "https://...", "error": "timeout"}
    """
    start = time.monotonic()
    try:
        req = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            elapsed = int((time.monotonic() - start) * 1000)
            return {
                "reachable": True,
                "url": url,
                "status": resp.getcode(),
                "latency_ms": elapsed,
            }
    except (urllib.error.URLError, OSError, ValueError) as exc:
        elapsed = int((time.monotonic() - start) * 1000)
        return {
            "reachable": False,
            "url": url,
            "error": str(exc)[:200],
            "latency_ms": elapsed,
        }


def wait_ready(
    check_fn: Callable[[], bool],
    max_wait_seconds: float = 60,
    interval: float = 5,
    sleep: Callable[[float], None] = time.sleep,
    on_wait: Callable[[float, float], None] | None = None,
) -> bool:
    """Poll ``check_fn`` every ``interval`` seconds for up to ``max_wait_seconds``.

    ``check_fn`` runs ``ceil(max_wait_seconds / interval)`` times and every
    failed check is followed by one ``interval`` sleep, so a timeout costs
    the whole budget. A zero budget means a single check and no sleep.
    Time is accounted in intervals, so a slow check does not cut the
    poll count.

    Args:
        check_fn: Returns True once the target is ready.
        max_wait_seconds: Total budget. Zero still allows one probe.
        interval: Seconds between probes.
        sleep: Blocking wait (injected for tests).
        on_wait: Called as ``on_wait(waited, max_wait_seconds)`` before each sleep.

    Returns:
        True if ready, False on timeout. Never raises for a failing probe.
    """
    if interval <= 0:
        raise ValueError(f"interval must be > 0, got {interval}")

    polls = max(1, math.ceil(max_wait_seconds / interval))
    waited = 0.0
    for _ in range(polls):
        try:
            if check_fn():
                return True
        except Exception as e:  # a probe blowing up counts as "not ready"
            logger.debug("Readiness probe raised: %s", e)

        if max_wait_seconds <= 0:
            break
        if on_wait is not None:
            on_wait(waited, max_wait_seconds)
        sleep(interval)
        waited += interval

    return False


def wait_for_network(
    reporter: Reporter,
    url: str = "https://www.google.com",
    max_wait: float = 60,
    interval: float = 5,
    timeout: float = 5,
    sleep: Callable[[float], None] = time.sleep,
    probe: Callable[[], bool] | None = None,
) -> bool:
    """Block until general internet connectivity is available."""
    reporter.info("Checking network connectivity...")

    check = probe or (lambda: bool(check_url_reachable(url, timeout=timeout)["reachable"]))

    def _waiting(waited: float, budget: float) -> None:
        reporter.warning(f"Waiting for network... ({waited:g}s/{budget:g}s)")

    if wait_ready(check, max_wait, interval, sleep=sleep, on_wait=_waiting):
        reporter.success("Network is available")
        return True

    reporter.error(f"Network not available after {max_wait:g}s")
    return False
