"""
intranet_portal.accounts

Account lifecycle package.

Responsibilities:
- Signup/profile field validation.
- The pending/active/blocked state machine and the per-request gate.
- Self-service flows: login, logout, password change, password recovery.
"""

# Package marker.
