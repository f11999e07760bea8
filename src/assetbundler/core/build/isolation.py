from __future__ import annotations

"""
Build Failure Domains.

Runs a build unit outside the calling thread of control and blocks until it
finishes. In "process" mode the unit runs in a dedicated single-worker
process pool, so a crash or runaway memory use inside a third-party
minifier cannot take the caller down. "thread" mode contains exceptions
only and exists for minifiers that cannot be pickled.

"process" workers are spawned: each one is a fresh interpreter that imports
the caller's __main__ module again. A script that serves and builds at
import time must therefore keep that code under

    if __name__ == "__main__":
        main()

or select the POSIX-only "fork" mode, which copies the running process and
re-runs nothing.
"""

import logging
import multiprocessing
from concurrent.futures import (
    Executor,
    ProcessPoolExecutor,
    ThreadPoolExecutor,
    TimeoutError as FutureTimeoutError,
)
from concurrent.futures.process import BrokenProcessPool
from typing import Any, Callable, Dict, Optional

from assetbundler.domain.constants import (
    ISOLATION_FORK,
    ISOLATION_MODES,
    ISOLATION_PROCESS,
    ISOLATION_THREAD,
)
from assetbundler.domain.errors import BuildError, ConfigError

logger = logging.getLogger(__name__)

# Default workers are fresh interpreters; "fork" is opt-in
_MP_START_METHOD = "spawn"

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def run_isolated(
        task: Callable[[Any], Dict[str, Any]],
        job: Any,
        *,
        mode: str = ISOLATION_PROCESS,
        timeout: Optional[float] = None,
        label: str = "",
) -> Dict[str, Any]:
    """
    Execute a build task in an isolated failure domain and wait for it.

    Args:
        task: Module-level callable receiving the job.
        job: Picklable job description.
        mode: "process", "fork" or "thread". "process" re-imports the
              caller's __main__ in the worker, so the calling script
              needs an `if __name__ == "__main__":` guard.
        timeout: Seconds to wait; None waits until the unit finishes.
        label: Identifier used in log and error messages.

    Returns:
        Dict[str, Any]: The status record returned by the task.

    Raises:
        ConfigError: Unknown isolation mode, or "fork" on a platform without it.
        BuildError: The unit crashed, raised, or overran the timeout.
    """
    executor = _create_executor(mode)
    timed_out = False

    try:
        future = executor.submit(task, job)
        return future.result(timeout=timeout)

    except FutureTimeoutError:
        timed_out = True
        logger.error(f"Build unit for {label} exceeded {timeout}s and was abandoned")
        raise BuildError(f"Building {label} timed out after {timeout} seconds", label) from None

    except BrokenProcessPool as e:
        logger.error(f"Build unit for {label} terminated abnormally: {e}")
        raise BuildError(f"The build process for {label} terminated abnormally", label) from e

    except (Exception, SystemExit) as e:
        # SystemExit raised inside the unit is re-raised here by the future
        logger.error(f"Build unit for {label} raised {type(e).__name__}: {e}")
        raise BuildError(f"Building {label} failed: {e}", label) from e

    finally:
        if timed_out:
            _terminate_workers(executor)
        executor.shutdown(wait=not timed_out, cancel_futures=True)

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _create_executor(mode: str) -> Executor:
    """Create a single-worker executor for the requested failure domain."""
    if mode == ISOLATION_PROCESS:
        return ProcessPoolExecutor(
            max_workers=1,
            mp_context=multiprocessing.get_context(_MP_START_METHOD),
        )
    if mode == ISOLATION_FORK:
        if ISOLATION_FORK not in multiprocessing.get_all_start_methods():
            raise ConfigError("The 'fork' isolation mode is not available on this platform")
        return ProcessPoolExecutor(
            max_workers=1,
            mp_context=multiprocessing.get_context(ISOLATION_FORK),
            initializer=_drop_inherited_handlers,
        )
    if mode == ISOLATION_THREAD:
        return ThreadPoolExecutor(max_workers=1, thread_name_prefix="BundleBuilder")
    raise ConfigError(f"Unknown isolation mode '{mode}', expected one of {ISOLATION_MODES}")


def _drop_inherited_handlers() -> None:
    """Detach the parent's root handlers in a forked worker; their listener thread is not copied."""
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)


def _terminate_workers(executor: Executor) -> None:
    """Kill the worker processes of a process pool; threads cannot be killed."""
    terminate = getattr(executor, "terminate_workers", None)
    if callable(terminate):
        terminate()
        return

    processes = getattr(executor, "_processes", None) or {}
    for process in list(processes.values()):
        try:
            process.terminate()
        except Exception as e:
            logger.debug(f"Failed to terminate build worker {process}: {e}")
