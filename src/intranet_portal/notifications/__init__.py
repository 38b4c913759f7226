"""
intranet_portal.notifications

Outbound notification package (email).
"""

# Package marker.
