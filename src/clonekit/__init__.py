"""clonekit: clone client engagements with client-data sanitization and lineage tracking."""
