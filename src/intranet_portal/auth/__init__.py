"""
intranet_portal.auth

Authentication package.

Responsibilities:
- Session token helpers and the identity provider boundary.
- Password hashing, complexity policy and generation.
- Principal / access-context types.
"""

# Package marker.
