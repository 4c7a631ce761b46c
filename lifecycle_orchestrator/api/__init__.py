"""HTTP status surface for the lifecycle manager."""
from lifecycle_orchestrator.api.main import create_app

__all__ = ["create_app"]
