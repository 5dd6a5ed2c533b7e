"""
XSpline Visualization

Diagnostic plots of a spline: the control polygon, control points coloured
by tension, the adaptively sampled curve with its junctions, and the signed
curvature along the parameter range.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
import matplotlib.pyplot as plt

from ..core.sampling import SampleFlag, SamplingParams
from ..core.xspline import XSpline
from ..exceptions import VisualizationError

logger = logging.getLogger(__name__)


@dataclass
class PlotConfig:
    """Configuration for spline diagnostics plots"""
    figsize: Tuple[float, float] = (10, 6)
    dpi: int = 150
    colormap: str = 'coolwarm'
    max_dist_from_spline: float = 0.05   # Sampling accuracy of the drawn curve
    curvature_samples: int = 400


class SplineVisualizer:
    """
    Creates diagnostic visualizations of an XSpline

    Provides methods to visualize:
    - Control polygon and tensions
    - Sampled curve and junction points
    - Signed curvature along t
    """

    def __init__(self, spline: XSpline, config: Optional[PlotConfig] = None):
        """Initialize visualizer with a spline

        Args:
            spline: Spline to visualize
            config: Plot configuration
        """
        self.spline = spline
        self.config = config or PlotConfig()

        logger.debug(f"Initialized SplineVisualizer for {spline.num_control_points()} control points")

    def plot_spline(self, ax: Optional[plt.Axes] = None,
                    save_path: Optional[str] = None) -> plt.Figure:
        """Plot control polygon, control points and the sampled curve

        Args:
            ax: Axes to draw into; a new figure is created if omitted
            save_path: Optional path to save the figure

        Returns:
            Matplotlib figure object
        """
        try:
            if ax is None:
                fig, ax = plt.subplots(figsize=self.config.figsize)
            else:
                fig = ax.figure

            positions = self.spline.control_points.positions()
            tensions = self.spline.control_points.tensions()

            ax.plot(positions[:, 0], positions[:, 1], '--', color='gray',
                    linewidth=0.8, label='Control polygon')
            scatter = ax.scatter(positions[:, 0], positions[:, 1], c=tensions,
                                 cmap=self.config.colormap, vmin=-1.0, vmax=1.0,
                                 zorder=3, label='Control points')
            fig.colorbar(scatter, ax=ax, label='Tension')

            if self.spline.num_control_points() >= 2:
                params = SamplingParams(max_dist_from_spline=self.config.max_dist_from_spline)
                samples = list(self.spline.sample(params))
                curve = np.array([s.point for s in samples])
                ax.plot(curve[:, 0], curve[:, 1], '-', color='black', linewidth=1.5,
                        label=f'Curve ({len(samples)} samples)')

                junctions = np.array([s.point for s in samples if s.flag != SampleFlag.DEFAULT])
                ax.plot(junctions[:, 0], junctions[:, 1], 'x', color='tab:green',
                        label='Junctions')

            ax.set_aspect('equal', adjustable='datalim')
            ax.set_title('X-Spline')
            ax.legend(loc='best')

            if save_path:
                fig.savefig(save_path, dpi=self.config.dpi, bbox_inches='tight')
                logger.info(f"Spline plot saved to {save_path}")

            return fig

        except VisualizationError:
            raise
        except Exception as e:
            raise VisualizationError(f"Failed to plot spline: {e}", plot_type="spline")

    def plot_curvature(self, save_path: Optional[str] = None) -> plt.Figure:
        """Plot signed curvature against t, with junction parameters marked

        Args:
            save_path: Optional path to save the figure

        Returns:
            Matplotlib figure object
        """
        if self.spline.num_control_points() < 2:
            raise VisualizationError("Need at least 2 control points", plot_type="curvature")

        try:
            ts = np.linspace(0.0, 1.0, self.config.curvature_samples)
            curvature = np.array([self.spline.signed_curvature(t) for t in ts])
            valid = ~np.isnan(curvature)

            fig, ax = plt.subplots(figsize=self.config.figsize)
            ax.plot(ts[valid], curvature[valid], '-', color='tab:blue')
            for i in range(self.spline.num_control_points()):
                ax.axvline(self.spline.control_point_index_to_t(i), color='gray',
                           linewidth=0.5, linestyle=':')
            ax.axhline(0.0, color='black', linewidth=0.5)
            ax.set_xlabel('t')
            ax.set_ylabel('Signed curvature')
            ax.set_title(f'Curvature ({int((~valid).sum())} zero-speed samples skipped)')

            if save_path:
                fig.savefig(save_path, dpi=self.config.dpi, bbox_inches='tight')
                logger.info(f"Curvature plot saved to {save_path}")

            return fig

        except Exception as e:
            raise VisualizationError(f"Failed to plot curvature: {e}", plot_type="curvature")
