"""
Proposal kernels for freely-jointed chain MCMC.

Each kernel is a pure function (coords, params, generator) -> candidate
that works on a copy of the current configuration and returns the full
candidate. Fixed points are applied afterwards by the ChainState.

Move kinds:
    - translation : shift a contiguous run of beads along a random direction
    - rotation    : rotate the beads before or after a pivot by a small
                    random rotation about the pivot
    - crankshaft  : rotate the beads between two beads about the axis
                    joining them
"""

from enum import Enum
from typing import Callable, Dict

import torch

from .config import StepParameters
from .core import random_angle, random_rotation_matrix, random_unit_vector, rotation_matrix


class MoveKind(str, Enum):
    TRANSLATION = "translation"
    ROTATION = "rotation"
    CRANKSHAFT = "crankshaft"


def _sorted_pair(a: torch.Tensor) -> tuple[int, int]:
    i, j = sorted(int(x) for x in a)
    return i, j


def propose_translation(
    coords: torch.Tensor,
    params: StepParameters,
    generator: torch.Generator
) -> torch.Tensor:
    """
    Translate beads i..j (inclusive) by a random vector.

    i <= j are drawn uniformly with repetition, so a single bead or the
    whole chain can move. The magnitude is translation_scale * U(0, 1).
    """
    n_beads = coords.shape[0]
    i, j = _sorted_pair(
        torch.randint(0, n_beads, (2,), generator=generator, device=coords.device)
    )
    unit = random_unit_vector(generator, dtype=coords.dtype, device=coords.device)
    magnitude = params.translation_scale * torch.rand(
        (), generator=generator, dtype=coords.dtype, device=coords.device
    )

    candidate = coords.clone()
    candidate[i:j + 1] += unit * magnitude
    return candidate


def propose_rotation(
    coords: torch.Tensor,
    params: StepParameters,
    generator: torch.Generator
) -> torch.Tensor:
    """
    Rotate the sub-chain on one side of a random pivot bead.

    The rotation is cone-capped at params.max_rotation_angle. A fair coin
    picks the beads before the pivot (0..i) or after it (i..N-1); their
    vectors relative to the pivot are rotated and the pivot stays put.
    """
    n_beads = coords.shape[0]
    pivot = int(torch.randint(0, n_beads, (1,), generator=generator, device=coords.device))
    R = random_rotation_matrix(
        params.max_rotation_angle, generator, dtype=coords.dtype, device=coords.device
    )
    after = bool(torch.rand((), generator=generator, device=coords.device) < 0.5)
    start, stop = (pivot, n_beads) if after else (0, pivot + 1)

    fixed_pt = coords[pivot]
    vectors = coords[start:stop] - fixed_pt

    candidate = coords.clone()
    candidate[start:stop] = fixed_pt + vectors @ R.T
    return candidate


def propose_crankshaft(
    coords: torch.Tensor,
    params: StepParameters,
    generator: torch.Generator
) -> torch.Tensor:
    """
    Rotate beads i..j about the axis from bead i to bead j.

    i < j are drawn without replacement and the angle is uniform on
    [0, 2π). Beads outside i..j are unchanged. A degenerate axis (beads i
    and j coincide) returns an unchanged copy.
    """
    n_beads = coords.shape[0]
    i, j = _sorted_pair(
        torch.randperm(n_beads, generator=generator, device=coords.device)[:2]
    )
    theta = random_angle(generator, dtype=coords.dtype, device=coords.device)

    candidate = coords.clone()
    axis = coords[j] - coords[i]
    if torch.linalg.norm(axis) == 0:
        return candidate

    R = rotation_matrix(axis, theta)
    fixed_pt = coords[i]
    vectors = coords[i:j + 1] - fixed_pt
    candidate[i:j + 1] = fixed_pt + vectors @ R.T
    return candidate


ProposalFn = Callable[[torch.Tensor, StepParameters, torch.Generator], torch.Tensor]

PROPOSALS: Dict[MoveKind, ProposalFn] = {
    MoveKind.TRANSLATION: propose_translation,
    MoveKind.ROTATION: propose_rotation,
    MoveKind.CRANKSHAFT: propose_crankshaft,
}

MOVE_KINDS = tuple(PROPOSALS)


def choose_move(generator: torch.Generator, device: torch.device | str = "cpu") -> MoveKind:
    """Uniform choice among the three move kinds."""
    return MOVE_KINDS[int(torch.randint(0, len(MOVE_KINDS), (1,), generator=generator,
                                        device=device))]
