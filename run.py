"""
Example simulation runner for ssDNA Monte Carlo.

This script orchestrates a short simulation:
1. Configuration setup (ssDNA anchored at the origin, confined above z=0)
2. Sampler initialization and burn-in
3. Production run, thinning and acceptance summary
4. Trace plots
"""

import time
from pathlib import Path

import matplotlib.pyplot as plt
import torch

from ssdna_mc import SimulationConfig, FreelyJointedMCMC, TraceAnalyzer
from ssdna_mc import OverlayPlotter, ValuePlotter, CorrelationPlotter


class Timer:
    """Simple timer for performance monitoring."""

    def __init__(self):
        self.start_time = time.perf_counter()
        self.last_lap = time.perf_counter()

    def lap(self) -> float:
        now = time.perf_counter()
        delta = now - self.last_lap
        self.last_lap = now
        return delta

    @property
    def total(self) -> float:
        return time.perf_counter() - self.start_time


def above_membrane(position: torch.Tensor) -> bool:
    """Boundary: beads must stay at or above the z=0 plane."""
    return bool(position[2] >= 0)


def end_to_end(coords: torch.Tensor) -> float:
    return float(torch.linalg.norm(coords[-1] - coords[0]))


def run_simulation(
    config: SimulationConfig,
    burn_in: int,
    samples: int,
    thinning: int,
    output_dir: Path
) -> FreelyJointedMCMC:
    """
    Main simulation entry point.

    Args:
        config:     Simulation configuration
        burn_in:    Steps discarded before sampling
        samples:    Production steps
        thinning:   Keep every thinning-th production sample
        output_dir: Directory for figures
    """
    timer = Timer()

    print(f"\n{'='*60}")
    print(f"ssDNA MCMC Simulation")
    print(f"{'='*60}")
    print(config)
    print(f"{'='*60}\n")

    mcmc = FreelyJointedMCMC(config)

    print(f"🔄 Burn-in: {burn_in} steps... ", end="", flush=True)
    mcmc.run(burn_in)
    print(f"Done! ({timer.lap():.2f}s)")

    # Restart counters and trace from the burnt-in configuration
    state, energy = mcmc.current_coords, mcmc.current_energy
    mcmc.reset_all()
    mcmc.accept(state, energy)

    print(f"🔄 Sampling: {samples} steps... ", end="", flush=True)
    mcmc.run(samples)
    mcmc.thin(thinning)
    print(f"Done! ({timer.lap():.2f}s, {len(mcmc.trace)} samples kept)")

    mcmc.acceptance_ratios()

    analyzer = TraceAnalyzer(mcmc.trace)
    overlay = OverlayPlotter(plt.figure(0))
    overlay.set_size(6, 6)
    overlay.plot(analyzer, thinning=max(1, analyzer.n_samples // 50))
    overlay.save(output_dir / "overlay.png")

    value = ValuePlotter(plt.figure(1))
    value.plot(analyzer, end_to_end)
    value.save(output_dir / "end_to_end.png")

    correlation = CorrelationPlotter(plt.figure(2))
    correlation.plot(analyzer, end_to_end)
    correlation.save(output_dir / "end_to_end_correlation.png")

    print(f"✅ Simulation complete! Total time: {timer.total:.2f}s")
    return mcmc


def main():
    """Main entry point for the simulation."""

    config = SimulationConfig(
        bases=30,
        fixed_points=[(1, [0.0, 0.0, 0.0])],
        boundary=above_membrane,
        seed=1738,
    )

    run_simulation(
        config=config,
        burn_in=2000,
        samples=20000,
        thinning=10,
        output_dir=Path("./local/outputs"),
    )


if __name__ == "__main__":
    main()
