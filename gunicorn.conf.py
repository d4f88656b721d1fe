"""Gunicorn configuration.

Each request is served by one worker thread; the application keeps no
shared mutable state between requests, so workers and threads scale freely.

Secrets are read by backend_resources.config.settings from /run/secrets
(Docker secrets) or the environment when the app is created in each worker.
"""
import os

bind = os.environ.get("GUNICORN_BIND", "0.0.0.0:8000")
wsgi_app = "backend_resources.wsgi:app"
worker_class = "gthread"
workers = int(os.environ.get("GUNICORN_WORKERS", "2"))
threads = int(os.environ.get("GUNICORN_THREADS", "4"))
timeout = int(os.environ.get("GUNICORN_TIMEOUT", "30"))
accesslog = "-"
loglevel = os.environ.get("LOG_LEVEL", "info").lower()


def post_fork(server, worker):
    """Called just after a worker has been forked."""
    from pathlib import Path

    secrets_dir = Path("/run/secrets")
    if secrets_dir.is_dir() and any(secrets_dir.iterdir()):
        worker.log.info("Using Docker secrets from /run/secrets")
    else:
        worker.log.info("No /run/secrets mount; credentials come from the environment")

    if os.environ.get("DEMO_MODE", "false").lower() == "true":
        worker.log.warning("DEMO_MODE=true - demo credentials in use")
