"""
FormCoach Threading Module
"""

from .worker_pool import (
    WorkerPool,
    Task,
    TaskStatus,
    pose_worker_pool,
    get_pose_pool
)

__all__ = [
    'WorkerPool',
    'Task',
    'TaskStatus',
    'pose_worker_pool',
    'get_pose_pool'
]
