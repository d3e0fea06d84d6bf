from typing import Any, Optional

from fastcore.xml import Script
from starlette.requests import Request
from pydantic import BaseModel, ConfigDict
from .signals import SignalDescriptor, EventMethodDescriptor
from .mixins import EntityMixin, PersistenceMixin

datastar_script = Script(src="https://cdn.jsdelivr.net/gh/starfederation/datastar@v1.0.0-beta.11/bundles/datastar.js", type="module")


class Entity(EntityMixin, PersistenceMixin, BaseModel):
    """Base class for all entity classes."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: Optional[str] = None

    # EntityMixin provides: configuration, signals, client sync
    # PersistenceMixin provides: save, delete, exists, get

    def __init__(self, req: Request = None, **kwargs):
        super().__init__(**kwargs)
        if not self.id:
            self.id = self._get_id(req, **kwargs)

        self._sync_from_client(req)

        if self.auto_persist:
            self.save()

    @classmethod
    def __pydantic_init_subclass__(cls, **kwargs: Any) -> None:
        super().__pydantic_init_subclass__(**kwargs)

        for field_name in cls.model_fields:
            setattr(cls, f"S{field_name}", SignalDescriptor(field_name))
        for field_name in cls.model_computed_fields:
            setattr(cls, f"S{field_name}", SignalDescriptor(field_name))

        # Swap @event methods for descriptors that build Datastar actions on the class
        for attr_name in dir(cls):
            if attr_name.startswith('__'):
                continue
            attr = getattr(cls, attr_name, None)
            if isinstance(attr, EventMethodDescriptor):
                if attr.entity_class is cls:
                    continue
                attr = attr.original_method
            if hasattr(attr, '_event_info'):
                setattr(cls, attr_name, EventMethodDescriptor(attr_name, cls, attr))
