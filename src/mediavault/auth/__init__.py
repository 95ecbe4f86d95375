"""
mediavault.auth

Authentication/authorization package.

Responsibilities:
- Token signing and verification (`jwt`).
- Fresh identity lookup for a verified subject (`principal`).
- Role-based access decisions (`access`).
- FastAPI dependencies chaining the three (`deps`).
"""

# Package marker.
