"""Gunicorn settings for serving the temp markdown API.

Reads the same environment variables as ``core.config.Settings`` plus a few
``GUNICORN_*`` overrides.

Usage (from ``server/``):
    gunicorn main:app -c gunicorn.conf.py
"""
import math
import os

host = os.getenv("HOST", "0.0.0.0")
port = os.getenv("PORT", "3000")
debug = os.getenv("DEBUG", "false").lower() == "true"
store_timeout = float(os.getenv("STORE_TIMEOUT_SECONDS", "5"))

bind = f"{host}:{port}"

# Each worker opens its own Redis pool; scale with WORKERS, not CPU count
workers = int(os.getenv("WORKERS", "1"))
worker_class = "uvicorn.workers.UvicornWorker"

# Share links are built from X-Forwarded-Proto and the client IP from
# X-Forwarded-For. Only the proxy listed here may set them.
forwarded_allow_ips = os.getenv("FORWARDED_ALLOW_IPS", "127.0.0.1")

# A create makes up to five EXISTS checks and one SET, each bounded by the store timeout
timeout = int(os.getenv("GUNICORN_TIMEOUT", str(max(30, math.ceil(store_timeout * 6) + 5))))
# Shutdown waits for pending lazy deletes before closing the pool
graceful_timeout = int(os.getenv("GUNICORN_GRACEFUL_TIMEOUT", str(math.ceil(store_timeout) + 5)))
keepalive = int(os.getenv("GUNICORN_KEEPALIVE", "5"))

max_requests = int(os.getenv("GUNICORN_MAX_REQUESTS", "10000"))
max_requests_jitter = int(os.getenv("GUNICORN_MAX_REQUESTS_JITTER", "1000"))

# Request lines carry document ids, which act as bearer links. Keep them out
# of access logs unless explicitly enabled.
accesslog = "-" if os.getenv("ACCESS_LOG", "false").lower() == "true" else None
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "INFO").lower()

proc_name = "temp-markdown"

preload_app = not debug
