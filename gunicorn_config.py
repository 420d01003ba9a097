"""
Gunicorn settings for the Reading Club backend

Every value can be overridden with a GUNICORN_* environment variable.

Usage:
    gunicorn --config gunicorn_config.py wsgi:app
"""
import multiprocessing
import os

bind = os.getenv('GUNICORN_BIND', '0.0.0.0:8000')

# Requests are short database round trips, so plain sync workers suffice.
# Leader writes are compare-and-swap in SQL, so any worker count is safe.
workers = int(os.getenv('GUNICORN_WORKERS', multiprocessing.cpu_count() * 2 + 1))
worker_class = os.getenv('GUNICORN_WORKER_CLASS', 'sync')
timeout = int(os.getenv('GUNICORN_TIMEOUT', '30'))
graceful_timeout = int(os.getenv('GUNICORN_GRACEFUL_TIMEOUT', '30'))
keepalive = int(os.getenv('GUNICORN_KEEPALIVE', '5'))

# Recycle workers now and then to bound memory growth
max_requests = int(os.getenv('GUNICORN_MAX_REQUESTS', '5000'))
max_requests_jitter = int(os.getenv('GUNICORN_MAX_REQUESTS_JITTER', '500'))

# JSON API only: keep request headers small
limit_request_line = int(os.getenv('GUNICORN_LIMIT_REQUEST_LINE', '4096'))
limit_request_fields = int(os.getenv('GUNICORN_LIMIT_REQUEST_FIELDS', '50'))

accesslog = os.getenv('GUNICORN_ACCESS_LOG', '-')
errorlog = os.getenv('GUNICORN_ERROR_LOG', '-')
loglevel = os.getenv('GUNICORN_LOG_LEVEL', 'info')
access_log_format = '%(h)s "%(r)s" %(s)s %(b)s %(D)sus'

proc_name = 'reading_club'

raw_env = [
    f"FLASK_ENV={os.getenv('FLASK_ENV', 'production')}",
]


def when_ready(server):
    server.log.info("Reading Club backend listening on %s with %s workers", bind, workers)


def worker_abort(worker):
    """Worker killed by timeout; the request's transaction was never committed"""
    worker.log.warning("Worker %s aborted after %ss timeout", worker.pid, timeout)
