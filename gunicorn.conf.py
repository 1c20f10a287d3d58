"""
Gunicorn configuration for production deployment of the catalog API.
"""
from pathlib import Path

from framework.config import settings

LOG_DIR = Path(settings.LOG_DIR)
LOG_DIR.mkdir(parents=True, exist_ok=True)

# Server
bind = "0.0.0.0:8000"
backlog = 2048

# Workers: each handles its requests with one UnitOfWork/session per request
workers = 2
worker_class = "uvicorn.workers.UvicornWorker"
max_requests = 1000
max_requests_jitter = 50
timeout = 60
keepalive = 5
graceful_timeout = 30

proc_name = (settings.GUNICORN_PROC_NAME or settings.APP_NAME.lower().replace(" ", "-"))[:32]

# Gunicorn's own logs; application logs are written by the app logger under the same directory
accesslog = str(LOG_DIR / "gunicorn_access.log")
errorlog = str(LOG_DIR / "gunicorn_error.log")
loglevel = "info"

pidfile = str(LOG_DIR / "gunicorn.pid")
daemon = False
preload_app = False  # Each worker configures its own logger handlers

limit_request_line = 4094
limit_request_fields = 100
limit_request_field_size = 8190


def when_ready(server):
    server.log.info("%s is ready. Listening on %s", settings.APP_NAME, server.address)


def post_fork(server, worker):
    server.log.info("Worker spawned (pid: %s)", worker.pid)


def on_exit(server):
    server.log.info("%s is shutting down.", settings.APP_NAME)
