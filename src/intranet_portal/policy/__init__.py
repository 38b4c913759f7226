"""
intranet_portal.policy

Authorization policy package.

Responsibilities:
- Typed catalog of modules and areas.
- Pure allow/deny and visibility decisions over an explicit access context.
"""

# Package marker.
