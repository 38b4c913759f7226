"""
intranet_portal.gateway

Privileged admin operations exposed through a single authorized entry point.
"""

# Package marker.
