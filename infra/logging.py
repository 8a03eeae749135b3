# infra/logging.py
"""
Structured JSON logging for generation and session events.

One JSON object per line. Events that belong to the same generation run
share a request_id (see new_request_id).
"""
import logging
import json
import uuid

import config

logging.basicConfig(level=getattr(logging, config.LOG_LEVEL, logging.INFO), format="%(message)s")


def new_request_id() -> str:
    return str(uuid.uuid4())


def log_event(event: str, level: int = logging.INFO, **kwargs):
    """
    Log a structured event with request_id and custom fields.
    Automatically generates request_id if not provided.
    """
    rec = {"event": event, "request_id": kwargs.pop("request_id", None) or new_request_id(), **kwargs}
    logging.log(level, json.dumps(rec, default=str))


def log_error(error: str, **kwargs):
    """
    Log an error event.
    """
    log_event("error", level=logging.ERROR, error=error, **kwargs)
