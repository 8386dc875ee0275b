from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional, Type, Union

import plotly.graph_objects as go

from rangeview.core.base_dataset import BaseDataset

from .base_vis import BaseVis
from .vis_registry import VisRegistry

logger = logging.getLogger(__name__)

VisSelector = Union[int, str, Type[BaseVis]]
Listener = Callable[[Optional[Type[BaseVis]], Optional[Type[BaseVis]]], None]


class MultiForm:
    """
    Shows one dataset with one of several plugins and switches between them.

    - 'visses' are the registry's plugins that accept the dataset
    - switch_to() changes the active plugin immediately and loads it in the
      background; a load that finishes after a newer switch is discarded
    - events: "change" fires when a switch starts, "changed" when the new
      plugin is ready; listeners get (new plugin class, previous plugin class)
    - options: {"all": {...}, "<vis id>": {...}} merged into each plugin's options

    Must be used from inside a running event loop.
    """

    def __init__(
        self,
        data: BaseDataset,
        registry: VisRegistry,
        initial_vis: VisSelector = 0,
        options: Optional[Dict[str, Any]] = None,
    ):
        self.data = data
        self.visses: List[Type[BaseVis]] = registry.list_for(data)
        self.initial_vis = initial_vis
        self.options: Dict[str, Any] = dict(options or {})

        self.act_vis: Optional[BaseVis] = None
        self.figure: Optional[go.Figure] = None
        self._act_desc: Optional[Type[BaseVis]] = None
        self._act_loader: Optional[asyncio.Future] = None
        self._generation = 0
        self._listeners: Dict[str, List[Listener]] = {}

    async def create(self) -> MultiForm:
        """Switch to the initial plugin and wait for it."""
        if self.visses:
            await self.switch_to(self.initial_vis)
        return self

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------
    def on(self, event: str, listener: Listener) -> None:
        self._listeners.setdefault(event, []).append(listener)

    def off(self, event: str, listener: Listener) -> None:
        if listener in self._listeners.get(event, []):
            self._listeners[event].remove(listener)

    def _fire(self, event: str, new: Optional[Type[BaseVis]], old: Optional[Type[BaseVis]]) -> None:
        for listener in list(self._listeners.get(event, [])):
            listener(new, old)

    # -------------------------------------------------------------------------
    # Switching
    # -------------------------------------------------------------------------
    @property
    def act(self) -> Optional[Type[BaseVis]]:
        """The selected plugin class (selected, not necessarily loaded)."""
        return self._act_desc

    @property
    def act_loader(self) -> Optional[asyncio.Future]:
        return self._act_loader

    def _select(self, param: VisSelector) -> Type[BaseVis]:
        """
        :raises ValueError: if no acceptable plugin matches `param`
        """
        if isinstance(param, int):
            if 0 <= param < len(self.visses):
                return self.visses[param]
        elif isinstance(param, str):
            for cls in self.visses:
                if cls.id == param:
                    return cls
        elif param in self.visses:
            return param
        raise ValueError(f"No vis matching {param!r} for this dataset")

    def _options_for(self, vis_cls: Type[BaseVis]) -> Dict[str, Any]:
        merged = dict(self.options.get("all", {}))
        merged.update(self.options.get(vis_cls.id, {}))
        return merged

    def switch_to(self, param: VisSelector) -> asyncio.Future:
        """
        Select a plugin by index, id or class and start loading it.

        Returns an awaitable of the loaded plugin, or of None if a newer
        switch superseded this one before it finished.
        """
        vis_cls = self._select(param)
        if vis_cls is self._act_desc and self._act_loader is not None:
            return self._act_loader

        previous = self._act_desc
        self._generation += 1
        token = self._generation

        self._act_desc = vis_cls
        self.act_vis = None
        self.figure = None
        self._fire("change", vis_cls, previous)

        self._act_loader = asyncio.ensure_future(self._load(vis_cls, previous, token))
        return self._act_loader

    async def _load(self, vis_cls: Type[BaseVis], previous: Optional[Type[BaseVis]], token: int) -> Optional[BaseVis]:
        vis = vis_cls(self.data, self._options_for(vis_cls))
        try:
            figure = await vis.build()
        except Exception:
            if token == self._generation:
                raise
            logger.warning(
                "Superseded vis load failed, discarding",
                exc_info=True,
                extra={"vis": vis_cls.id, "token": token, "current": self._generation},
            )
            return None

        if token != self._generation:
            logger.debug(
                "Discarding stale vis load",
                extra={"vis": vis_cls.id, "token": token, "current": self._generation},
            )
            return None

        self.act_vis = vis
        self.figure = figure
        self._fire("changed", vis_cls, previous)
        return vis

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------
    def persist(self) -> Dict[str, Any]:
        return {
            "id": self._act_desc.id if self._act_desc else None,
            "content": self.act_vis.persist() if self.act_vis is not None else None,
        }

    async def restore(self, persisted: Any) -> MultiForm:
        """
        Switch to the persisted plugin and restore its content.
        Unknown or missing plugin ids leave the current state unchanged.
        """
        if not isinstance(persisted, dict) or not persisted.get("id"):
            return self

        try:
            selected = self._select(persisted["id"])
        except ValueError:
            logger.debug("Persisted vis not available, restore is a no-op", extra={"vis": persisted["id"]})
            return self

        vis = await self.switch_to(selected)
        if vis is not None and persisted.get("content"):
            vis.restore(persisted["content"])
            self.figure = await vis.build()
        return self
