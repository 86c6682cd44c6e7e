"""
api/limiter.py -- Shared slowapi rate limiter instance.

Only POST /api/auth/login is limited. Its limit string is resolved from
Settings.login_rate_limit on each request (see api/routes/auth.py), keyed by
client IP. api/main.py mounts SlowAPIMiddleware and the 429 handler.

One instance holds the in-memory counters for the whole process; a second
Limiter would count separately and never trip.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address, storage_uri="memory://")
