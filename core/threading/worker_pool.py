"""
FormCoach Worker Thread Pool

ThreadPoolExecutor for pose frame processing without blocking the
async event loop.
"""

import asyncio
import logging
import threading
from concurrent.futures import ThreadPoolExecutor, Future
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Any

from core.config import settings

logger = logging.getLogger(__name__)


class TaskStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class Task:
    """Represents a processing task."""
    task_id: str
    func: Callable
    args: tuple = ()
    kwargs: dict = None
    status: TaskStatus = TaskStatus.PENDING
    created_at: datetime = None

    def __post_init__(self):
        if self.kwargs is None:
            self.kwargs = {}
        if self.created_at is None:
            self.created_at = datetime.now(timezone.utc)


class WorkerPool:
    """
    Thread pool for CPU-bound frame processing.

    Only in-flight tasks are tracked; finished tasks are dropped and
    counted, since every pose frame is a task.
    """

    def __init__(self, max_workers: int = None, name: str = "worker_pool"):
        self.max_workers = max_workers or settings.THREAD_POOL_SIZE
        self.name = name

        self._executor = ThreadPoolExecutor(
            max_workers=self.max_workers,
            thread_name_prefix=f"{name}_"
        )

        self._tasks: dict[str, Task] = {}
        self._lock = threading.Lock()
        self._task_counter = 0

        # Stats
        self._completed_count = 0
        self._failed_count = 0

        logger.info(f"🧵 WorkerPool '{name}' initialized (workers: {self.max_workers})")

    def submit(self, func: Callable, *args, task_id: str = None, **kwargs) -> Future:
        """
        Submit a task to the thread pool.

        Returns:
            the concurrent future of the task
        """
        with self._lock:
            self._task_counter += 1
            task_id = task_id or f"task_{self._task_counter}"
            task = Task(task_id=task_id, func=func, args=args, kwargs=kwargs)
            self._tasks[task_id] = task

        future = self._executor.submit(self._run_task, task)

        logger.debug(f"Task {task_id} submitted")
        return future

    async def submit_async(self, func: Callable, *args, task_id: str = None, **kwargs) -> Any:
        """Submit a task and await its result. Task exceptions propagate."""
        future = self.submit(func, *args, task_id=task_id, **kwargs)
        return await asyncio.wrap_future(future)

    def _run_task(self, task: Task) -> Any:
        """Execute a task in the thread pool."""
        task.status = TaskStatus.RUNNING

        try:
            result = task.func(*task.args, **task.kwargs)
            task.status = TaskStatus.COMPLETED
            with self._lock:
                self._completed_count += 1
            return result

        except Exception as e:
            task.status = TaskStatus.FAILED
            with self._lock:
                self._failed_count += 1
            logger.error(f"Task {task.task_id} failed: {e}")
            raise

        finally:
            with self._lock:
                self._tasks.pop(task.task_id, None)

    # ========================================
    # Lifecycle
    # ========================================

    def shutdown(self, wait: bool = True):
        """Shutdown the thread pool."""
        logger.info(f"Shutting down WorkerPool '{self.name}'...")
        self._executor.shutdown(wait=wait)
        logger.info(f"WorkerPool '{self.name}' shutdown complete")

    def get_stats(self) -> dict:
        """Get pool statistics."""
        with self._lock:
            tasks = list(self._tasks.values())
        return {
            "name": self.name,
            "max_workers": self.max_workers,
            "pending_tasks": len([t for t in tasks if t.status == TaskStatus.PENDING]),
            "running_tasks": len([t for t in tasks if t.status == TaskStatus.RUNNING]),
            "completed_tasks": self._completed_count,
            "failed_tasks": self._failed_count,
        }


# ============================================
# Global Worker Pool
# ============================================

# Pose frame processing pool (rep counting, form scoring)
pose_worker_pool = WorkerPool(name="pose_processing")


def get_pose_pool() -> WorkerPool:
    """Get the pose processing worker pool."""
    return pose_worker_pool

