"""Gunicorn config for container deployment."""
import os

bind = f"0.0.0.0:{os.environ.get('PORT', '8000')}"

# Uvicorn async workers — each holds its own copy of the fund snapshots.
# Snapshots are small (thousands of rows), so workers are cheap; tune via WEB_CONCURRENCY.
worker_class = "uvicorn.workers.UvicornWorker"
workers = int(os.environ.get("WEB_CONCURRENCY", "2"))

# Workbook uploads re-normalize every sheet before responding
timeout = 60

graceful_timeout = 30

keepalive = 65

# Logging
accesslog = "-"
errorlog = "-"
loglevel = os.environ.get("FUND_EXPLORER_LOG_LEVEL", "info").lower()
