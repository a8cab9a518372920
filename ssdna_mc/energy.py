"""
Energy model for the freely-jointed ssDNA chain.

All energies are in pN*nm. For bead coordinates x_1..x_N:

    U_s = 1/2 * k_s * sum((|x_{i+1} - x_i| - l_k)^2)     stretching
    U_b = -k_b * sum(cos(theta_i))                       bending

where theta_i is the angle between consecutive segments at an interior
joint. Constraint and interaction energies come from user callables.
"""

import math
from dataclasses import dataclass
from typing import Callable, Optional

import torch

from .config import BoundaryFn, ForceFn, InteractionFn, SimulationConfig


def segment_vectors(coords: torch.Tensor) -> torch.Tensor:
    """Vectors between consecutive beads, shape (N-1, 3)."""
    return torch.diff(coords, dim=0)


def bond_angle_cosines(coords: torch.Tensor) -> torch.Tensor:
    """
    Cosine of the angle between each segment and the next one.

    Returns:
        Tensor of N entries; the first and last (chain termini) are 0.
    """
    vectors = segment_vectors(coords)
    lengths = torch.linalg.norm(vectors, dim=1)
    interior = (vectors[:-1] * vectors[1:]).sum(dim=1) / lengths[:-1] / lengths[1:]
    end = torch.zeros(1, dtype=coords.dtype, device=coords.device)
    return torch.cat([end, interior, end])


def stretching_energy(coords: torch.Tensor, k_s: float, l_k: float) -> float:
    lengths = torch.linalg.norm(segment_vectors(coords), dim=1)
    return float(0.5 * k_s * torch.sum((lengths - l_k) ** 2))


def bending_energy(coords: torch.Tensor, k_b: float) -> float:
    return float(-k_b * torch.sum(bond_angle_cosines(coords)))


def bonded_energy(coords: torch.Tensor, k_s: float, k_b: float, l_k: float) -> float:
    """Stretching plus bending energy U of a configuration."""
    return stretching_energy(coords, k_s, l_k) + bending_energy(coords, k_b)


def constraint_energy(
    candidate: torch.Tensor,
    current: torch.Tensor,
    boundary: Optional[BoundaryFn] = None,
    force_function: Optional[ForceFn] = None,
    force_values: Optional[Callable] = None,
) -> float:
    """
    Energy from the boundary and the external force field.

    A configured force_values field always raises, whatever the other
    terms are. A candidate with any bead outside the boundary scores +inf
    and no other term is evaluated. Otherwise the force function is summed over each
    bead's displacement from its last accepted position, so the result is
    the external-force contribution to this move's energy difference, not
    a function of the candidate alone.

    Args:
        candidate: Proposed configuration, shape (N, 3)
        current:   Last accepted configuration, shape (N, 3)

    Raises:
        NotImplementedError: if force_values is configured
    """
    if force_values is not None:
        raise NotImplementedError("force_values has not yet been implemented")

    if boundary is not None:
        for bead in candidate:
            if not bool(boundary(bead)):
                return math.inf

    if force_function is not None:
        displacements = candidate - current
        return float(sum(float(force_function(d)) for d in displacements))

    return 0.0


def interaction_energy(
    candidate: torch.Tensor,
    interaction_function: Optional[InteractionFn] = None
) -> float:
    """User interaction potential evaluated once on the whole candidate."""
    if interaction_function is None:
        return 0.0
    return float(interaction_function(candidate))


@dataclass(frozen=True)
class EnergyModel:
    """
    Energy terms of one sampler, bound to its configuration.

    Holds the physical constants and user callables so the sampler can
    score candidates without re-reading the config.
    """
    k_s: float
    k_b: float
    l_k: float
    boundary: Optional[BoundaryFn] = None
    force_function: Optional[ForceFn] = None
    force_values: Optional[Callable] = None
    interaction_function: Optional[InteractionFn] = None

    @classmethod
    def from_config(cls, config: SimulationConfig) -> "EnergyModel":
        return cls(
            k_s=config.k_s,
            k_b=config.k_b,
            l_k=config.l_k,
            boundary=config.boundary,
            force_function=config.force_function,
            force_values=config.force_values,
            interaction_function=config.interaction_function,
        )

    def bonded(self, coords: torch.Tensor) -> float:
        return bonded_energy(coords, self.k_s, self.k_b, self.l_k)

    def interaction(self, coords: torch.Tensor) -> float:
        return interaction_energy(coords, self.interaction_function)

    def constraint(self, candidate: torch.Tensor, current: torch.Tensor) -> float:
        return constraint_energy(
            candidate, current,
            boundary=self.boundary,
            force_function=self.force_function,
            force_values=self.force_values,
        )
