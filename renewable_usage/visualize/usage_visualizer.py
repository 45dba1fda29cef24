"""
Renewable Energy Usage Visualizations.

Draws the report charts from aggregate rows and a ChartSpec: matplotlib and
seaborn for the static charts, plotly for the country map.
"""

import pandas as pd
import matplotlib.pyplot as plt
import seaborn as sns
import plotly.express as px
import plotly.graph_objects as go
from pathlib import Path
from typing import Optional
import logging

from ..errors import RenderError
from ..utils.constants import DEFAULT_DPI, PLACEHOLDER_MESSAGE
from .chart_spec import ChartSpec, CHART_KINDS

logger = logging.getLogger(__name__)

# Set style
plt.style.use('seaborn-v0_8-whitegrid')
sns.set_palette("Set2")


class UsageVisualizer:
    """Renders aggregate rows into chart artifacts."""

    def __init__(self, output_dir: str = "results/report", dpi: int = DEFAULT_DPI):
        """Initialize the usage visualizer."""
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.dpi = dpi

        # Fixed colors so a source looks the same on every chart
        self.source_colors = {
            'Solar': '#F39C12',
            'Wind': '#3498DB',
            'Hydro': '#1ABC9C',
            'Biomass': '#27AE60',
            'Geothermal': '#E74C3C',
        }

    def _color(self, source) -> str:
        return self.source_colors.get(str(source), '#95A5A6')

    def render(self, rows: Optional[pd.DataFrame], spec: ChartSpec) -> Path:
        """
        Draw one chart and write it to the output directory.

        Empty input produces a placeholder artifact instead of a chart.

        Args:
            rows: Aggregate rows for the chart
            spec: Chart specification

        Returns:
            Path of the written artifact

        Raises:
            RenderError: If the chart kind is unknown or columns are missing
        """
        if spec.kind not in CHART_KINDS:
            raise RenderError(f"Unknown chart kind '{spec.kind}' for {spec.name}")

        if rows is None or rows.empty:
            logger.warning(f"No rows for {spec.name}; writing placeholder")
            return self.render_placeholder(spec)

        missing = [col for col in spec.required_columns if col not in rows.columns]
        if missing:
            raise RenderError(f"Rows for {spec.name} missing columns: {missing}")

        if spec.kind == 'map':
            return self.create_usage_map(rows, spec)

        draw = {
            'bar': self._draw_bar,
            'line': self._draw_line,
            'box': self._draw_box,
            'errorbar': self._draw_errorbar,
        }[spec.kind]

        fig, ax = plt.subplots(figsize=(10, 6))
        try:
            draw(ax, rows, spec)
            ax.set_title(spec.title, fontsize=14, fontweight='bold')
            ax.set_xlabel(spec.x_label or spec.x)
            ax.set_ylabel(spec.y_label or spec.y)
            fig.tight_layout()
            return self._save_figure(fig, spec)
        finally:
            plt.close(fig)

    def _save_figure(self, fig: plt.Figure, spec: ChartSpec) -> Path:
        output_path = self.output_dir / spec.filename
        fig.savefig(output_path, dpi=self.dpi, bbox_inches='tight')
        logger.info(f"Saved {spec.name} to {output_path}")
        return output_path

    def _draw_bar(self, ax, rows: pd.DataFrame, spec: ChartSpec):
        """Horizontal bars, first row at the top."""
        labels = rows[spec.y].astype(str).tolist()
        values = rows[spec.x].tolist()
        ax.barh(labels, values, color=[self._color(label) for label in labels], edgecolor='black')
        ax.invert_yaxis()
        for i, value in enumerate(values):
            ax.text(value, i, f" {value:,.2f}", va='center', fontsize=9)

    def _draw_line(self, ax, rows: pd.DataFrame, spec: ChartSpec):
        """One line per series in ``spec.color``, x ascending."""
        for series, group in rows.groupby(spec.color, sort=False):
            group = group.sort_values(spec.x, kind='mergesort')
            ax.plot(group[spec.x], group[spec.y], 'o-', linewidth=2,
                    color=self._color(series), label=str(series))
        ax.set_xticks(sorted(rows[spec.x].unique()))
        ax.legend(title=spec.color.replace('_', ' '), loc='best')
        ax.grid(True, alpha=0.3)

    def _draw_box(self, ax, rows: pd.DataFrame, spec: ChartSpec):
        """One box per x group."""
        order = sorted(rows[spec.x].unique())
        sns.boxplot(data=rows, x=spec.x, y=spec.y, order=order, color='steelblue', ax=ax)

    def _draw_errorbar(self, ax, rows: pd.DataFrame, spec: ChartSpec):
        """Point per x with an error bar from ``spec.lower`` to ``spec.upper``."""
        below = rows[spec.y] - rows[spec.lower]
        above = rows[spec.upper] - rows[spec.y]
        ax.errorbar(rows[spec.x], rows[spec.y], yerr=[below.tolist(), above.tolist()],
                    fmt='o', color='darkgreen', ecolor='gray', elinewidth=2, capsize=5)
        ax.set_xticks(sorted(rows[spec.x].unique()))
        ax.grid(True, alpha=0.3)

    def build_usage_map(self, rows: pd.DataFrame, spec: ChartSpec) -> Optional[go.Figure]:
        """
        Bubble map with one marker per country at its capital.

        Marker area grows with the ``spec.size`` column; hovering shows the
        country name and its total. Rows without coordinates are skipped.

        Args:
            rows: Country rows joined with coordinates
            spec: Map chart specification

        Returns:
            Plotly figure, or None when no row has coordinates
        """
        mapped = rows.dropna(subset=[spec.y, spec.x, spec.size])
        skipped = len(rows) - len(mapped)
        if skipped:
            logger.warning(f"Skipping {skipped} rows without coordinates on {spec.name}")
        if mapped.empty:
            return None

        fig = px.scatter_geo(
            mapped,
            lat=spec.y,
            lon=spec.x,
            size=spec.size,
            hover_name=spec.label,
            hover_data={spec.size: ':,.1f', spec.y: False, spec.x: False},
            projection='natural earth',
            size_max=40,
            title=spec.title,
        )
        fig.update_traces(marker=dict(color='#27AE60', line=dict(width=1, color='black')))
        fig.update_layout(height=600, margin=dict(l=10, r=10, t=60, b=10))
        return fig

    def create_usage_map(self, rows: pd.DataFrame, spec: ChartSpec) -> Path:
        """Write the country bubble map as HTML, or a placeholder if nothing is mappable."""
        fig = self.build_usage_map(rows, spec)
        if fig is None:
            return self.render_placeholder(spec)

        output_path = self.output_dir / spec.filename
        fig.write_html(str(output_path))
        logger.info(f"Saved {spec.name} to {output_path}")

        return output_path

    def render_placeholder(self, spec: ChartSpec) -> Path:
        """Write an artifact that only states there is no data to show."""
        output_path = self.output_dir / spec.filename

        if spec.is_interactive:
            fig = go.Figure()
            fig.add_annotation(text=PLACEHOLDER_MESSAGE, showarrow=False,
                               xref='paper', yref='paper', x=0.5, y=0.5, font=dict(size=20))
            fig.update_layout(title=spec.title, xaxis=dict(visible=False), yaxis=dict(visible=False))
            fig.write_html(str(output_path))
        else:
            fig, ax = plt.subplots(figsize=(10, 6))
            try:
                ax.text(0.5, 0.5, PLACEHOLDER_MESSAGE, ha='center', va='center',
                        fontsize=16, transform=ax.transAxes)
                ax.set_title(spec.title, fontsize=14, fontweight='bold')
                ax.axis('off')
                fig.savefig(output_path, dpi=self.dpi, bbox_inches='tight')
            finally:
                plt.close(fig)

        logger.info(f"Saved placeholder for {spec.name} to {output_path}")
        return output_path
