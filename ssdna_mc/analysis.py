"""
Analysis tools for sampled ssDNA configurations.

This module provides the TraceAnalyzer class for computing geometric and
statistical properties of an MCMC trace, including:
- Arbitrary per-sample observables
- End-to-end distances
- Radius of gyration
- Autocorrelation of an observable along the trace
"""

from typing import Callable, Sequence

import numpy as np
import torch
from scipy import signal


class TraceAnalyzer:
    """
    Read-only analyzer over a trace of configurations.

    Accepts the sampler's trace (a list of (N, 3) tensors) or an already
    stacked (T, N, 3) tensor / array. The trace is copied on construction,
    so thinning or resetting the sampler afterwards does not affect it.

    Attributes:
        n_samples: Number of configurations T
        n_beads:   Number of beads N
    """

    def __init__(self, trace: Sequence[torch.Tensor] | torch.Tensor | np.ndarray):
        if isinstance(trace, (torch.Tensor, np.ndarray)):
            coords = torch.as_tensor(trace, dtype=torch.float64)
        elif len(trace) == 0:
            raise ValueError("Cannot analyze an empty trace.")
        else:
            coords = torch.stack([torch.as_tensor(c, dtype=torch.float64) for c in trace])

        if coords.dim() != 3 or coords.shape[-1] != 3:
            raise ValueError(
                f"Unexpected trace shape: {tuple(coords.shape)}. Expected (T, N, 3)."
            )
        self._coords = coords.detach().cpu().clone()
        self.n_samples, self.n_beads, _ = self._coords.shape

    @property
    def coordinates(self) -> np.ndarray:
        """Trace as NumPy array, shape (T, N, 3)."""
        return self._coords.numpy()

    def values(self, fcn: Callable[[torch.Tensor], float]) -> np.ndarray:
        """
        Evaluate an observable on every sample.

        Args:
            fcn: configuration (N, 3) -> scalar

        Returns:
            Observable values, shape (T,)
        """
        return np.array([float(fcn(c)) for c in self._coords])

    def end_to_end_distance(self) -> np.ndarray:
        """Distance between the first and last bead of each sample, shape (T,)."""
        return torch.linalg.norm(self._coords[:, -1] - self._coords[:, 0], dim=1).numpy()

    def radius_of_gyration(self) -> np.ndarray:
        """Root mean squared bead distance from the center of mass, shape (T,)."""
        centered = self._coords - self._coords.mean(dim=1, keepdim=True)
        return torch.sqrt((centered ** 2).sum(dim=2).mean(dim=1)).numpy()

    def autocorrelation(
        self,
        fcn: Callable[[torch.Tensor], float],
        max_lag: int | None = None
    ) -> np.ndarray:
        """
        Normalized sample autocorrelation of an observable along the trace.

        Defaults to min(T / 10, 5000) lags, as a quick look at how fast
        the sampler decorrelates.

        Args:
            fcn:     configuration (N, 3) -> scalar
            max_lag: Largest lag to return

        Returns:
            Autocorrelation at lags 0..max_lag, shape (max_lag + 1,);
            lag 0 is 1 unless the observable is constant (then all nan)
        """
        if max_lag is None:
            max_lag = int(min(self.n_samples / 10, 5000))
        max_lag = max(0, min(int(max_lag), self.n_samples - 1))

        y = self.values(fcn)
        y = y - y.mean()
        full = signal.correlate(y, y, mode="full", method="auto")
        acf = full[self.n_samples - 1:self.n_samples + max_lag]

        if acf[0] == 0:
            return np.full(max_lag + 1, np.nan)
        return acf / acf[0]
