"""
mediavault.services

Service layer (transaction + persistence owner).

Responsibilities:
- Own commit/rollback boundaries for multi-step operations.
- Combine repositories and storage so routers stay thin.
"""

# Package marker.
