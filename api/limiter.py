"""
api/limiter.py -- Shared slowapi rate limiter instance.

Imported by api/main.py (to mount as middleware) and by the route modules
that apply per-route limits with @limiter.limit(). A single shared instance
means every route counts against the same in-memory store.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address, storage_uri="memory://")
