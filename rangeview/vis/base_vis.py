from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import plotly.graph_objects as go

from rangeview.core.base_dataset import BaseDataset


class BaseVis(ABC):
    """
    Abstract base class for visualisation plugins.

    Contract:
    - expose an 'id' (used internally and in persisted state) and a 'label'
    - 'accepts' tells the registry whether the plugin can show a dataset
    - 'compute_data' resolves what the plugin needs from its dataset (async)
    - 'render_figure' turns that into a plotly figure (sync, no data access)
    - a plugin never mutates its dataset
    """

    id: str = None
    label: str = None

    def __init__(self, data: BaseDataset, options: Optional[Dict[str, Any]] = None):
        self.data = data
        self.options: Dict[str, Any] = dict(options or {})

    @classmethod
    def accepts(cls, data: BaseDataset) -> bool:
        return True

    @abstractmethod
    async def compute_data(self) -> Any:
        raise NotImplementedError()

    @abstractmethod
    def render_figure(self, computed: Any) -> go.Figure:
        raise NotImplementedError()

    # ------------------------------------------------------------------
    # Common helpers for all plugins
    # ------------------------------------------------------------------
    async def build(self) -> go.Figure:
        return self.render_figure(await self.compute_data())

    def persist(self) -> Dict[str, Any]:
        return dict(self.options)

    def restore(self, persisted: Any) -> BaseVis:
        if isinstance(persisted, dict):
            self.options.update(persisted)
        return self

    @staticmethod
    def empty_figure(message: str) -> go.Figure:
        """
        Standardised 'no data' figure used by all plugins.
        """
        fig = go.Figure()
        fig.update_layout(
            title=message,
            xaxis={"visible": False},
            yaxis={"visible": False},
        )
        return fig
