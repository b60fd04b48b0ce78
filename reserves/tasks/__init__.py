"""
Background Tasks Module

This module contains all background task definitions for ARQ workers.

Task Organization:
-----------------
- reminder_tasks.py: Hourly reminder sweep (events, training,
  equipment returns, policy acknowledgement)

Task functions receive a special `ctx` parameter:
- ctx['database']: Database created by the worker startup hook
- ctx['settings']: Settings the worker was started with
- ctx['job_id']: Unique ID of this job
- ctx['job_try']: Which retry attempt this is (1, 2, 3...)

Running Workers:
---------------
    # Start a worker (from project root)
    arq reserves.worker.WorkerSettings
"""

from reserves.tasks.reminder_tasks import process_reminders

# Export all task functions
# These names are used when enqueueing: enqueue_job('process_reminders')
__all__ = [
    "process_reminders",
]
