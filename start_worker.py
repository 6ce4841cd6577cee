#!/usr/bin/env python3
"""
Startup script for the alert worker.
Runs the health check HTTP server and the Celery worker in one container.
"""
import logging
import os
import subprocess
import sys
import time

from app.config import settings
from app.logging_config import setup_logging
from app.worker_health import start_health_server

logger = logging.getLogger("app.worker")


def main():
    setup_logging(settings.log_level, settings.log_file)
    port = int(os.getenv("PORT", 8080))

    # Importing the app validates broker settings and registers the tasks
    from app.tasks.celery_app import broker_reachable, celery_broker_url

    logger.info("Using broker %s...", celery_broker_url[:50])

    start_health_server(broker_reachable, port)
    # Give the health server a moment to start listening
    time.sleep(1)

    celery_cmd = [
        "celery",
        "-A", "app.tasks.celery_app",
        "worker",
        f"--loglevel={settings.log_level.lower()}",
        "--concurrency=2",
        "--without-gossip",
        "--without-mingle",
        "--without-heartbeat",
    ]
    logger.info("Starting Celery worker")
    sys.stdout.flush()
    sys.stderr.flush()

    process = subprocess.Popen(
        celery_cmd,
        stdout=sys.stdout,
        stderr=sys.stderr,
        bufsize=0,
        env=os.environ.copy(),
    )
    returncode = process.wait()
    if returncode != 0:
        logger.error("Celery worker exited with code %d", returncode)
        # Let the health check answer briefly before the container stops
        time.sleep(5)
    sys.exit(returncode)


if __name__ == "__main__":
    main()
