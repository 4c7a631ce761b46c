# lifecycle_orchestrator/schemas/base.py
from typing import Any, Dict

from pydantic import BaseModel as _BaseModel, ConfigDict


class BaseModel(_BaseModel):
    """Immutable read model handed out to readers on any thread"""
    model_config = ConfigDict(frozen=True, protected_namespaces=())

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary for API responses."""
        return self.model_dump(mode="json")
