"""Agape - client library and operator tooling for crisis-family fundraising.

Agape lets supporters browse crisis family profiles, follow a merged feed of
family media and text updates, like and share content, and earn points for
doing so. All data lives in a hosted PostgREST/auth backend; this package is
the client side of it.

Key modules:

- :mod:`agape.backend` - httpx client for the data API (PostgREST) and auth API
- :mod:`agape.services` - Families, posts, engagement and points services
- :mod:`agape.auth` - Auth store, login rate limiter, password strength, login flow
- :mod:`agape.feed` - Merged chronological feed with optimistic like/share
"""

__version__ = "0.4.0"
