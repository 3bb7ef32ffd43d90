"""HTTP surface for engagement cloning (preview, clone, lineage)."""

from .app import create_app

__all__ = ["create_app"]
