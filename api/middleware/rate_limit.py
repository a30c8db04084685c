"""Rate limiting using slowapi, keyed by client address."""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)

# Rate limit strings for use with @limiter.limit() decorator
WRITE_LIMIT = "30/minute"           # POST/PATCH/DELETE on records
CONVERSATION_LIMIT = "5/minute"     # Each call creates a paid Tavus conversation
