from __future__ import annotations

import asyncio

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from rangeview.core.base_dataset import BaseDataset

from .base_vis import BaseVis


class HeatmapVis(BaseVis):
    """
    Heat map of every cell of a 2-D dataset, rows × columns.

    Options:
    - color_scale: plotly continuous colour scale (default "viridis")
    """

    id = "heatmap"
    label = "Heatmap"

    @classmethod
    def accepts(cls, data: BaseDataset) -> bool:
        return len(data.dim) == 2

    async def compute_data(self) -> pd.DataFrame:
        if 0 in self.data.dim:
            return pd.DataFrame()

        values, rows, cols = await asyncio.gather(
            self.data.data(),
            self.data.rows(),
            self.data.cols(),
        )
        return pd.DataFrame(values, index=pd.Index(rows, name="row"), columns=pd.Index(cols, name="col"))

    def render_figure(self, computed: pd.DataFrame) -> go.Figure:
        if computed is None or computed.empty:
            return self.empty_figure("No data to show")

        fig = px.imshow(
            computed,
            color_continuous_scale=self.options.get("color_scale", "viridis"),
            aspect="auto",
            labels=dict(x="Column", y="Row", color="Value"),
        )

        fig.update_xaxes(side="top")
        fig.update_layout(
            height=600,
            margin=dict(l=40, r=40, b=40, t=40),
        )
        return fig
