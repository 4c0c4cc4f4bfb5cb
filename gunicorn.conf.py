"""
Gunicorn configuration for the CEMSE placement API

Run with:
    gunicorn cemse.main:app -c gunicorn.conf.py
"""
import multiprocessing
import os

# Server socket
bind = f"{os.getenv('HOST', '0.0.0.0')}:{os.getenv('PORT', '8000')}"
backlog = 2048

# Worker processes
# Each worker holds its own pool, so workers x (pool + overflow) must fit the server limit
_connections_per_worker = int(os.getenv("DATABASE_POOL_SIZE", 20)) + int(os.getenv("DATABASE_MAX_OVERFLOW", 10))
_max_db_connections = int(os.getenv("DATABASE_MAX_CONNECTIONS", 100))
_default_workers = max(1, min(multiprocessing.cpu_count() * 2 + 1, _max_db_connections // _connections_per_worker))
workers = int(os.getenv("GUNICORN_WORKERS", _default_workers))
worker_class = "uvicorn.workers.UvicornWorker"

# Worker lifecycle
max_requests = 1000
max_requests_jitter = 100

# Timeouts
timeout = 30
keepalive = 5
graceful_timeout = 30

# Process naming
proc_name = "cemse_api"

# Logging
accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s" %(D)s'


# Server hooks
def on_starting(server):
    server.log.info(
        "Starting CEMSE API (auth mode: %s, workers: %s, db connections per worker: %s)",
        os.getenv("AUTH_MODE", "production"),
        workers,
        _connections_per_worker,
    )


def when_ready(server):
    server.log.info("Gunicorn server is ready. Spawning workers")


def worker_abort(worker):
    worker.log.info("Worker received SIGABRT signal")
