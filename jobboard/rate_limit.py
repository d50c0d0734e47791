"""
JobBoard - Centralized rate limiting configuration.

All rate limit decorators should import `limiter` from this module.
The limiter keys on client IP address (via X-Forwarded-For when behind a proxy).
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)

# --- Rate limit constants ---

# Write operations (create, update, withdraw, delete). Status updates send email.
RATE_LIMIT_GENERAL = "30/minute"

# Read-heavy endpoints (list, detail). Generous, 1/sec sustained
RATE_LIMIT_READ = "60/minute"
