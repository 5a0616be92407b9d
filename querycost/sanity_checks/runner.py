from __future__ import annotations

from typing import Awaitable, Callable, List, Optional, Sequence

from querycost.smart_logger import SmartLogger
from querycost.sanity_checks.check_db import SanityCheckResult, check_target_db


SanityCheck = Callable[[], Awaitable[SanityCheckResult]]


async def run_startup_sanity_checks_or_raise(
    checks: Optional[Sequence[SanityCheck]] = None,
) -> List[SanityCheckResult]:
    """
    Run startup sanity checks (fail-fast).

    Raises:
        RuntimeError: if any check fails.
    """
    if checks is None:
        checks = [check_target_db]

    results: List[SanityCheckResult] = [await check() for check in checks]
    failed = [r for r in results if not r.ok]

    for r in results:
        SmartLogger.log(
            "INFO" if r.ok else "ERROR",
            f"startup.sanity.{r.name}." + ("ok" if r.ok else "fail"),
            category="startup.sanity",
            params=r.to_log_params(),
            max_inline_chars=0,
        )

    if failed:
        SmartLogger.log(
            "CRITICAL",
            "startup.sanity.failed",
            category="startup.sanity",
            params={"failed": [f.name for f in failed]},
            max_inline_chars=0,
        )
        raise RuntimeError("Startup sanity checks failed. See logs for details.")

    SmartLogger.log("INFO", "startup.sanity.passed", category="startup.sanity", params=None, max_inline_chars=0)
    return results
