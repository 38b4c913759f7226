"""
intranet_portal.db.repositories

Repository package.

Responsibilities:
- Group data-access repositories for the persistence layer.
"""

# Package marker; repositories are imported directly from submodules.


# --- Module Notes -----------------------------------------------------------
# Repositories are intentionally thin; access-control decisions belong in
# `intranet_portal.policy` and the account/gateway services.
