"""
mediavault.ingestion

Upload intake, admission checks and on-disk media storage.
"""
