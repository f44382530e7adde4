"""Rate limiter instance for SlowAPI.

Shared so both main (app.state.limiter) and route modules can use the same
instance without circular imports. Exports read whole collections, so
they are limited per client address.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)

EXPORT_LIMIT = "30/minute"
BATCH_EXPORT_LIMIT = "5/minute"

limit_exports = limiter.limit(EXPORT_LIMIT)
limit_batch_exports = limiter.limit(BATCH_EXPORT_LIMIT)
