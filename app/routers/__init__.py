# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - users.py: Profile updates (profile picture) and signup rejection
# - posts.py: Posts with image/video media
# - stories.py: Expiring stories
# - listings.py: Events and businesses with an image
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import users
from . import posts
from . import stories
from . import listings

__all__ = [
    "health",
    "users",
    "posts",
    "stories",
    "listings",
]
