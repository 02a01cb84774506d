"""
CLI Module - Command-line interface for the schedule engine.

Provides management commands for:
- Schedule generation and estimates
- Conflict and alert review
- CSV export
"""

from .schedule_commands import schedule, register_commands

__all__ = ['schedule', 'register_commands']
