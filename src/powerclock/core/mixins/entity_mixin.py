"""
EntityMixin: Core entity functionality without base model dependencies.

Provides configuration, Datastar signals and client sync on top of any
pydantic base model.
"""

import json
from typing import Any, Dict, Optional

from fasthtml.common import Div
from starlette.requests import Request

from ...persistence import MemoryRepo


class EntityMixin:
    """
    Core entity functionality mixin.

    Configuration lives in class attributes. Pydantic subclasses override them
    with `ClassVar` annotations so they are not picked up as private attributes.
    """

    _use_namespace: bool = True
    _auto_persist: bool = True
    _sync_with_client: bool = True
    _namespace: Optional[str] = None
    _persistence_backend_class = MemoryRepo  # Store class, not instance
    _ttl: Optional[int] = None

    @classmethod
    def get_namespace(cls) -> str:
        return cls._namespace or cls.__name__

    @property
    def namespace(self):
        return self.get_namespace()

    @property
    def use_namespace(self):
        return self._use_namespace

    @property
    def sync_with_client(self):
        return self._sync_with_client

    @property
    def auto_persist(self):
        return self._auto_persist

    @property
    def persistence_backend(self):
        return self._persistence_backend_class()

    @property
    def signals(self) -> Dict[str, Any]:
        """Datastar signals for this entity, nested under the namespace when enabled."""
        if self.use_namespace:
            return {self.namespace: self.model_dump()}
        return self.model_dump()

    def set_from_request(self, req: Request, **kwargs) -> 'EntityMixin':
        """Copy matching fields from the Datastar payload of `req`."""
        from ..events import datastar_from_queryParams
        datastar = datastar_from_queryParams(req)
        scoped = datastar.get(self.namespace) if self.use_namespace else None
        for f in self.__class__.model_fields.keys():
            if isinstance(scoped, dict) and f in scoped:
                setattr(self, f, scoped[f])
            elif f in datastar:
                setattr(self, f, datastar[f])
        return self

    def _sync_from_client(self, req: Request):
        if req is not None and self.sync_with_client:
            self.set_from_request(req)

    @classmethod
    def get_session_id(cls, req: Request, **kwargs) -> str:
        """Generate deterministic entity ID. Override in subclasses for custom logic."""
        session_id = 'default'
        if req is not None and hasattr(req, 'cookies'):
            session_id = req.cookies.get('session_', 'default')
        return f"{cls.__name__.lower()}_{session_id[:100]}"

    @classmethod
    def _get_id(cls, req: Request, **kwargs) -> str:
        field = cls.model_fields.get('id')
        default = field.default if field is not None else None
        return default or cls.get_session_id(req, **kwargs)

    def __ft__(self):
        """Render with data-signals attributes."""
        return Div(data_signals=json.dumps(self.signals), id=f"{self.namespace}")

