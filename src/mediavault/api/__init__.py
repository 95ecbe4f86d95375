"""
mediavault.api

API package for the media vault service.

Responsibilities:
- FastAPI app factory and router modules.
- API-layer dependency wiring, response envelope and error mapping.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Routers stay thin: request parsing + auth dependencies + delegation to services.
