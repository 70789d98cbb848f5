"""
FormCoach Shared Module

Common utilities used across services.
"""

from .utils import (
    setup_logger,
    success_response,
    get_now_iso,
    round_half_up,
    clamp,
)

__all__ = [
    'setup_logger',
    'success_response',
    'get_now_iso',
    'round_half_up',
    'clamp',
]
