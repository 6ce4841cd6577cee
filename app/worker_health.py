"""
Health endpoint for the alert worker container.

The worker is only useful while it can reach its broker, so the endpoint
runs a caller-supplied check on each request and answers 503 when it fails.
"""
import json
import logging
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Callable

logger = logging.getLogger(__name__)

HEALTH_PATHS = ('/health', '/')


def make_health_handler(check: Callable[[], bool], service: str = "alert-worker"):
    """Build a request handler class that reports the result of ``check``."""

    class HealthCheckHandler(BaseHTTPRequestHandler):
        def do_GET(self):
            if self.path not in HEALTH_PATHS:
                self.send_response(404)
                self.end_headers()
                return

            healthy = check()
            body = json.dumps({
                "status": "healthy" if healthy else "degraded",
                "service": service,
                "broker": healthy,
            }).encode()
            self.send_response(200 if healthy else 503)
            self.send_header('Content-Type', 'application/json')
            self.send_header('Content-Length', str(len(body)))
            self.end_headers()
            self.wfile.write(body)

        def log_message(self, format, *args):
            # Orchestrator health checks hit this every few seconds
            pass

    return HealthCheckHandler


def start_health_server(check: Callable[[], bool], port: int = 8080, host: str = '0.0.0.0') -> ThreadingHTTPServer:
    """Serve the health endpoint from a daemon thread. Port 0 picks a free port."""
    server = ThreadingHTTPServer((host, port), make_health_handler(check))
    server.daemon_threads = True
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    logger.info("Health server listening on %s:%d", host, server.server_address[1])
    return server
