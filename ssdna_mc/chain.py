"""
Chain state for the freely-jointed ssDNA model.

ChainState owns the bead coordinates (the initial configuration and the
current, last accepted one) and the fixed-point constraints. Bead
coordinates are stored as (N, 3) float64 tensors in nm.
"""

import numpy as np
import torch

from .config import SimulationConfig

# Tolerance (nm) for deciding whether a proposal moved a fixed bead
FIXED_POINT_TOLERANCE = 1e-9


class ChainState:
    """
    Bead positions and fixed-point constraints of one chain.

    The initial configuration is built once at construction:
        - from config.initial_coordinates, truncated to N rows, or
        - as a straight line along z with spacing l_k, translated so that
          the first configured fixed point sits at its assigned position.

    Attributes:
        n_beads:     Number of beads N
        fixed:       {0-based bead index: assigned position}
        mode:        "overwrite" or "reject" fixed-point handling
    """

    def __init__(self, config: SimulationConfig):
        self._device = config.torch_device
        self.n_beads = config.n_beads
        self.fixed = config.fixed_bead_indices
        self.mode = config.fixed_point_mode
        self.verbose = config.verbose

        self._initial = self._build_initial(config)
        self.current = self._initial.clone()

    def _build_initial(self, config: SimulationConfig) -> torch.Tensor:
        if config.initial_coordinates is not None:
            coords = torch.as_tensor(
                np.asarray(config.initial_coordinates, dtype=np.float64),
                device=self._device
            )
            if coords.shape[0] != self.n_beads and self.verbose:
                print(
                    f"⚠️  Expected {self.n_beads} Kuhn segments, but "
                    f"{coords.shape[0]} initial coordinates were specified; "
                    f"keeping the first {self.n_beads}."
                )
            return coords[:self.n_beads].clone()

        coords = torch.zeros((self.n_beads, 3), dtype=torch.float64, device=self._device)
        coords[:, 2] = torch.arange(
            self.n_beads, dtype=torch.float64, device=self._device
        ) * config.l_k

        if config.fixed_points:
            base_number, position = config.fixed_points[0]
            anchor = torch.as_tensor(position, dtype=torch.float64, device=self._device)
            coords = coords + (anchor - coords[config.bead_index(base_number)])
        return coords

    @property
    def initial(self) -> torch.Tensor:
        """Starting configuration, shape (N, 3). Never modified."""
        return self._initial

    def apply_fixed_points(self, candidate: torch.Tensor) -> torch.Tensor:
        """Overwrite every fixed bead of `candidate` with its position, in place."""
        for index, position in self.fixed.items():
            candidate[index] = position
        return candidate

    def displaces_fixed_points(self, candidate: torch.Tensor) -> bool:
        """
        Whether `candidate` moved any fixed bead relative to the current state.

        Checked on the raw proposal, before apply_fixed_points().
        """
        for index in self.fixed:
            moved = torch.linalg.norm(candidate[index] - self.current[index])
            if moved > FIXED_POINT_TOLERANCE:
                return True
        return False

    def constrain(self, candidate: torch.Tensor) -> tuple[torch.Tensor, bool]:
        """
        Apply fixed points to a raw proposal.

        Returns:
            candidate: The proposal with every fixed bead at its position
            violates:  True when mode is "reject" and the raw proposal
                       displaced a fixed bead
        """
        violates = self.mode == "reject" and self.displaces_fixed_points(candidate)
        return self.apply_fixed_points(candidate), violates

    def reset(self) -> None:
        """Restore the current configuration to the initial one."""
        self.current = self._initial.clone()
