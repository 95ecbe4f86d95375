"""
mediavault.api.routers

HTTP route modules (health, dev, users, tags, media).
"""
