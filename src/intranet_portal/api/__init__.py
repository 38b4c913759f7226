"""
intranet_portal.api

HTTP surface of the portal (FastAPI).
"""

# Package marker.
