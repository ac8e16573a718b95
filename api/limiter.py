"""
api/limiter.py -- Shared slowapi rate limiter instance.

Import this in api/main.py (to mount as middleware) and in route modules (to
apply per-route limits with @limiter.limit()).

The instance is module-global because @limiter.limit() registers each
route's limit on it at import time. Every app in the process therefore
shares it: api.main.create_app() sets limiter.enabled from
Settings.rate_limit_enabled (the last app built wins) and resets the
in-memory counters.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address, storage_uri="memory://")
