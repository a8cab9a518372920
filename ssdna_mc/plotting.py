"""
Visualization tools for ssDNA MCMC traces.

This module provides plotting classes for monitoring the sampler:
3D snapshots of single configurations, overlays of many samples, and
the evolution and autocorrelation of an observable along the trace.
"""

from pathlib import Path
from typing import Callable, Optional

import matplotlib.pyplot as plt
import numpy as np

from .analysis import TraceAnalyzer

# Constants for visualization
DEFAULT_ELEVATION = 20
DEFAULT_AZIMUTH = 45


class BasePlotter:
    """
    Base class for all plotters.

    Provides common functionality for figure management and saving.
    """

    def __init__(self, fig: Optional[plt.Figure] = None, ax=None):
        """
        Initialize plotter with figure and axes.

        Args:
            fig: Matplotlib figure (creates new if None)
            ax: Matplotlib axes (creates new if None)
        """
        self.fig = fig if fig else plt.figure()
        self.ax = ax if ax else self.fig.add_subplot(111)

    def set_size(self, width: float, height: float) -> None:
        """Set figure size in inches."""
        self.fig.set_figwidth(width)
        self.fig.set_figheight(height)

    def save(self, output_path: Path | str, dpi: int = 128) -> None:
        """Save the figure, creating parent directories as needed."""
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        self.fig.savefig(output_path, dpi=dpi)
        print(f"✅ Saved figure: {output_path}")

    def plot(self, analyzer: TraceAnalyzer, *args, **kwargs):
        """
        Plot analyzer data. Must be implemented by subclasses.

        Args:
            analyzer: TraceAnalyzer instance
        """
        raise NotImplementedError("Subclasses must implement plot()")


class SnapshotPlotter(BasePlotter):
    """3D line plot of the chain at one trace index."""

    def __init__(self, fig: Optional[plt.Figure] = None, ax=None):
        if ax is None:
            fig = fig if fig else plt.figure()
            ax = fig.add_subplot(111, projection="3d")

        super().__init__(fig, ax)

    def plot(self, analyzer: TraceAnalyzer, time_index: int = -1) -> None:
        """
        Add one configuration to the axes.

        Args:
            analyzer:   TraceAnalyzer instance
            time_index: Trace index to draw (0-based, negative from the end)
        """
        x, y, z = analyzer.coordinates[time_index].T
        self.ax.plot(x, y, z, "o-")
        self.ax.set_box_aspect([1, 1, 1])
        self.ax.view_init(elev=DEFAULT_ELEVATION, azim=DEFAULT_AZIMUTH)


class OverlayPlotter(SnapshotPlotter):
    """
    Every `thinning`-th configuration of the trace drawn on one set of axes.

    Lateral limits are fixed to +/- half_width nm and the z range covers
    every drawn sample.
    """

    def plot(
            self,
            analyzer: TraceAnalyzer,
            thinning: int = 1,
            half_width: float = 5.0
    ) -> None:
        """
        Args:
            analyzer:   TraceAnalyzer instance
            thinning:   Draw samples thinning, 2*thinning, ... (1-based)
            half_width: Lateral plot extent in nm
        """
        self.ax.clear()
        indices = range(thinning - 1, analyzer.n_samples, thinning)
        for i in indices:
            super().plot(analyzer, time_index=i)

        z = analyzer.coordinates[:, :, 2]
        self.ax.set_xlim(-half_width, half_width)
        self.ax.set_ylim(-half_width, half_width)
        self.ax.set_zlim(z.min(), max(z.max(), z.min() + 1e-9))


class ValuePlotter(BasePlotter):
    """Evolution of an observable along the trace."""

    def plot(self, analyzer: TraceAnalyzer, fcn: Callable, label: str | None = None) -> None:
        """
        Args:
            analyzer: TraceAnalyzer instance
            fcn:      configuration -> scalar
            label:    Name shown in the title (defaults to the function name)
        """
        label = label or getattr(fcn, "__name__", "value")
        y = analyzer.values(fcn)

        self.ax.clear()
        self.ax.plot(np.arange(1, len(y) + 1), y, "k")
        self.ax.set_title(f"Function: {label}")
        self.ax.set_xlabel("Sample number")
        self.ax.set_ylabel("Function value")


class CorrelationPlotter(BasePlotter):
    """Autocorrelation of an observable along the trace."""

    def plot(
            self,
            analyzer: TraceAnalyzer,
            fcn: Callable,
            max_lag: int | None = None,
            label: str | None = None
    ) -> None:
        """
        Args:
            analyzer: TraceAnalyzer instance
            fcn:      configuration -> scalar
            max_lag:  Largest lag (defaults to min(T/10, 5000))
            label:    Name shown in the title (defaults to the function name)
        """
        label = label or getattr(fcn, "__name__", "value")
        acf = analyzer.autocorrelation(fcn, max_lag=max_lag)

        self.ax.clear()
        self.ax.stem(np.arange(len(acf)), acf)
        self.ax.axhline(0.0, color="k", lw=0.5)
        self.ax.set_title(f"Correlation: {label}")
        self.ax.set_xlabel("Lag (samples)")
        self.ax.set_ylabel("Correlation")
        self.ax.grid(True, linestyle='--', alpha=0.3)


# Export all plotter classes
__all__ = [
    'SnapshotPlotter',
    'OverlayPlotter',
    'ValuePlotter',
    'CorrelationPlotter',
    'BasePlotter',
]
