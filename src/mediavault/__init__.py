"""
mediavault

Top-level package for the media vault service (users, tags, media uploads).

Responsibilities:
- Expose package version metadata.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
