"""Utility modules for cross-cutting concerns."""

from utils.timezone import now_utc, to_utc, from_unix, parse_iso, seconds_until
from utils.request_context import get_request_id, request_context
