"""
Logging setup for the ride share API

Plain text logs in development, JSON lines in production, an always-on
error log file, and per-request timing with a correlation id that is echoed
back to the client as X-Request-ID.
"""

import os
import sys
import json
import uuid
import time
import logging
import traceback
from datetime import datetime, timezone
from typing import Dict, Any, Optional
from flask import has_request_context, request, g

LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')
SLOW_REQUEST_SECONDS = 5.0

# Attributes every LogRecord carries; anything else came in through extra=
_RECORD_ATTRS = set(vars(logging.LogRecord('', 0, '', 0, '', (), None))) | {'message', 'correlation_id'}


class JSONFormatter(logging.Formatter):
    """One JSON object per line, with the request and route arguments when available"""

    def __init__(self, application_name: str = "rideshare_api"):
        super().__init__()
        self.application_name = application_name
        self.environment = os.environ.get('FLASK_ENV', 'development')

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'application': self.application_name,
            'environment': self.environment,
        }

        if has_request_context():
            entry['correlation_id'] = g.get('correlation_id')
            entry['request'] = {
                'method': request.method,
                'path': request.path,
                'remote_addr': request.remote_addr,
                # e.g. request_id / progress_id / driver_name from the URL
                'route_args': request.view_args or {},
            }

        if record.exc_info and record.exc_info[0]:
            exc_type, exc_value, _ = record.exc_info
            entry['exception'] = {
                'type': exc_type.__name__,
                'message': str(exc_value),
                'traceback': traceback.format_exception(*record.exc_info),
            }

        extra = {key: value for key, value in vars(record).items() if key not in _RECORD_ATTRS}
        if extra:
            entry['extra'] = extra

        if record.levelno in (logging.DEBUG, logging.ERROR):
            entry['location'] = {'file': record.pathname, 'function': record.funcName, 'line': record.lineno}

        return json.dumps(entry, ensure_ascii=False, default=str)


class RequestContextFilter(logging.Filter):
    """Stamp records with the correlation id of the request being served"""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = g.get('correlation_id', '-') if has_request_context() else '-'
        return True


def _make_handler(handler: logging.Handler, level, formatter: logging.Formatter) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    handler.addFilter(RequestContextFilter())
    return handler


def setup_logging(app=None, log_dir: Optional[str] = None) -> logging.Logger:
    """
    Configure root logging for the application.

    Environment:
        LOG_LEVEL: DEBUG/INFO/WARNING/ERROR/CRITICAL (default INFO)
        USE_JSON_LOGGING: 'true' for JSON lines (always on in production)
        ENABLE_FILE_LOGGING: 'true' to also write application.log
        LOG_DIR: directory for log files (default 'logs')
    """
    log_level = os.environ.get('LOG_LEVEL', 'INFO').upper()
    if log_level not in LOG_LEVELS:
        log_level = 'INFO'

    production = os.environ.get('FLASK_ENV') == 'production'
    use_json = production or os.environ.get('USE_JSON_LOGGING', 'false').lower() == 'true'
    if use_json:
        formatter = JSONFormatter()
    else:
        formatter = logging.Formatter('[%(asctime)s] %(levelname)s %(correlation_id)s in %(name)s: %(message)s')

    log_dir = log_dir or os.environ.get('LOG_DIR', 'logs')
    os.makedirs(log_dir, exist_ok=True)

    handlers = [
        _make_handler(logging.StreamHandler(sys.stdout), log_level, formatter),
        _make_handler(logging.FileHandler(os.path.join(log_dir, 'error.log')), logging.ERROR, formatter),
    ]
    if os.environ.get('ENABLE_FILE_LOGGING', 'false').lower() == 'true':
        handlers.append(_make_handler(logging.FileHandler(os.path.join(log_dir, 'application.log')),
                                      log_level, formatter))

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    for handler in handlers:
        root_logger.addHandler(handler)

    if production:
        for noisy in ('werkzeug', 'urllib3', 'sqlalchemy.engine'):
            logging.getLogger(noisy).setLevel(logging.WARNING)

    if app:
        app.logger.info(f"Logging configured: level={log_level}, json_format={use_json}")

    return root_logger


def _status_log_level(status_code: int, duration: float) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400 or duration > SLOW_REQUEST_SECONDS:
        return logging.WARNING
    return logging.INFO


def log_request_start():
    g.request_start_time = time.perf_counter()
    g.correlation_id = request.headers.get('X-Request-ID') or uuid.uuid4().hex


def log_request_end(response):
    """Log method, path, status and duration; echo the correlation id"""
    if 'request_start_time' not in g:
        return response

    duration = time.perf_counter() - g.request_start_time
    duration_ms = round(duration * 1000, 2)

    logging.getLogger('rideshare.requests').log(
        _status_log_level(response.status_code, duration),
        f"{request.method} {request.path} {response.status_code} in {duration_ms}ms",
        extra={'status_code': response.status_code, 'duration_ms': duration_ms},
    )
    response.headers['X-Request-ID'] = g.correlation_id
    return response
