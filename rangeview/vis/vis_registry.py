from __future__ import annotations

from typing import Any, Dict, List, Optional, Type

from rangeview.core.base_dataset import BaseDataset

from .base_vis import BaseVis


class VisRegistry:
    """
    Registry of visualisation plugin classes.

    - stores classes, not instances; plugins are created per dataset on demand
    - only BaseVis subclasses can be registered, each with a unique 'id'
    """

    def __init__(self):
        self._visses: Dict[str, Type[BaseVis]] = {}

    def register(self, vis_cls: Type[BaseVis]) -> Type[BaseVis]:
        """
        :raises TypeError: if vis_cls is not a subclass of BaseVis
        :raises ValueError: if a plugin with the same 'id' already exists
        """
        if not isinstance(vis_cls, type) or not issubclass(vis_cls, BaseVis):
            raise TypeError(f"Vis '{getattr(vis_cls, 'id', vis_cls)}' must be a subclass of BaseVis")

        if vis_cls.id in self._visses:
            raise ValueError(f"Vis '{vis_cls.id}' already registered")

        self._visses[vis_cls.id] = vis_cls
        return vis_cls

    def create(self, vis_id: str, data: BaseDataset, options: Optional[Dict[str, Any]] = None) -> BaseVis:
        """
        :raises KeyError: if no plugin with the given id exists
        """
        try:
            cls = self._visses[vis_id]
        except KeyError:
            raise KeyError(f"Vis '{vis_id}' not found") from None
        return cls(data, options)

    def all_classes(self) -> List[Type[BaseVis]]:
        return list(self._visses.values())

    def list_for(self, data: BaseDataset) -> List[Type[BaseVis]]:
        """Plugins that can show `data`, in registration order."""
        return [cls for cls in self._visses.values() if cls.accepts(data)]
