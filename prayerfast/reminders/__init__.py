"""Prayer-time reminder engine (scheduler tick, Celery worker, push dispatcher).

Runs as separate processes next to the main backend: a Celery beat (or the
standalone tick loop) drives the per-minute tick, Celery workers consume the
reminder queue, and a small FastAPI service exposes operational endpoints.
"""
