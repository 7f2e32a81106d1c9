"""
Background Tasks

Fire-and-forget execution for work that must never block or fail the
gameplay path: recognition logging and mapping usage counters.

Usage:
    from utils.tasks import run_in_background
    
    run_in_background(logger.write, record, task_name="log_recognition")
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, Optional, Set

from utils.logging import get_logger

logger = get_logger(__name__)


# Strong references so running tasks are not garbage collected
_background_tasks: Set[asyncio.Task] = set()

_stats: Dict[str, int] = {
    "started": 0,
    "completed": 0,
    "failed": 0,
}


async def _run_safely(
    func: Callable[..., Awaitable[Any]],
    task_name: str,
    args: tuple,
    kwargs: Dict[str, Any],
) -> Optional[Any]:
    """Run a coroutine function, logging instead of raising on failure."""
    try:
        result = await func(*args, **kwargs)
        _stats["completed"] += 1
        return result
    except asyncio.CancelledError:
        raise
    except Exception as e:
        _stats["failed"] += 1
        logger.error(f"Background task failed: {task_name} - {e}")
        return None


def run_in_background(
    func: Callable[..., Awaitable[Any]],
    *args,
    task_name: str = None,
    **kwargs
) -> Optional[asyncio.Task]:
    """
    Schedule a coroutine function on the running loop without awaiting it.
    
    Args:
        func: Async function to execute
        *args: Positional arguments for the function
        task_name: Human-readable task name for logs
        **kwargs: Keyword arguments for the function
        
    Returns:
        The scheduled task, or None when no event loop is running
    """
    task_name = task_name or func.__name__
    
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        logger.warning(f"No running event loop, dropped background task: {task_name}")
        return None
    
    task = loop.create_task(_run_safely(func, task_name, args, kwargs), name=task_name)
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)
    _stats["started"] += 1
    
    logger.debug(f"Background task scheduled: {task_name}")
    return task


async def wait_for_background_tasks(timeout: Optional[float] = None) -> None:
    """Wait for pending background tasks (used on shutdown and in tests)."""
    if not _background_tasks:
        return
    
    pending = list(_background_tasks)
    _, still_pending = await asyncio.wait(pending, timeout=timeout)
    
    if still_pending:
        logger.warning(f"{len(still_pending)} background task(s) still running after wait")


def get_task_stats() -> Dict[str, Any]:
    """Get background task statistics."""
    return {
        **_stats,
        "running": len(_background_tasks),
    }
