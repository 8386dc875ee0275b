from __future__ import annotations

import plotly.graph_objects as go

from rangeview.core.stats import Histogram

from .base_vis import BaseVis


class HistogramVis(BaseVis):
    """
    Value histogram of any dataset.

    Options:
    - bins: number of bins; Sturges' rule when missing
    """

    id = "histogram"
    label = "Histogram"

    async def compute_data(self) -> Histogram:
        return await self.data.hist(self.options.get("bins"))

    def render_figure(self, computed: Histogram) -> go.Figure:
        if computed is None or sum(computed.counts) == 0:
            return self.empty_figure("No data to show")

        edges = computed.edges
        centers = [(lo + hi) / 2 for lo, hi in zip(edges[:-1], edges[1:])]
        widths = [hi - lo for lo, hi in zip(edges[:-1], edges[1:])]

        fig = go.Figure(go.Bar(x=centers, y=computed.counts, width=widths))
        fig.update_layout(
            xaxis_title="Value",
            yaxis_title="Count",
            bargap=0,
            height=400,
            margin=dict(l=40, r=40, b=40, t=40),
        )
        return fig
