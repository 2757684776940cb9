"""Celery app for Boxoffice.

Run a worker with ``celery -A boxoffice worker -l INFO``.
"""

import os
import typing as t

import structlog
from celery import Celery
from celery.signals import task_postrun, task_prerun

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "boxoffice.settings")

app = Celery("boxoffice")
app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


@task_prerun.connect
def bind_task_context(task_id: str, task: t.Any, *args: t.Any, **kwargs: t.Any) -> None:
    """Give every log line emitted by a task its id, name and retry count."""
    from common.observability import current_trace_id

    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(
        task_id=task_id,
        task_name=task.name,
        retries=getattr(task.request, "retries", 0),
    )
    if trace_id := current_trace_id():
        structlog.contextvars.bind_contextvars(trace_id=trace_id)


@task_postrun.connect
def clear_task_context(*args: t.Any, **kwargs: t.Any) -> None:
    structlog.contextvars.clear_contextvars()
