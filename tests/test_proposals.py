"""
Tests for the translation, rotation and crankshaft proposal kernels.
"""

import math

import pytest
import torch

from ssdna_mc import MoveKind, PROPOSALS, SimulationConfig, rodrigues_rotation, rotation_matrix
from ssdna_mc.core import random_rotation_matrix, random_unit_vector
from ssdna_mc.proposals import (
    choose_move,
    propose_crankshaft,
    propose_rotation,
    propose_translation,
)

from conftest import random_coil


@pytest.fixture
def params():
    return SimulationConfig(verbose=False).step_parameters


def segment_lengths(coords):
    return torch.linalg.norm(torch.diff(coords, dim=0), dim=1)


def changed_rows(before, after, atol=1e-12):
    return [i for i in range(before.shape[0])
            if not torch.allclose(before[i], after[i], atol=atol)]


class TestCoreGeometry:

    def test_rodrigues_quarter_turn(self):
        v = torch.tensor([[1.0, 0.0, 0.0]], dtype=torch.float64)
        k = torch.tensor([[0.0, 0.0, 1.0]], dtype=torch.float64)
        rotated = rodrigues_rotation(v, k, math.pi / 2)
        assert torch.allclose(rotated, torch.tensor([[0.0, 1.0, 0.0]], dtype=torch.float64))

    def test_rotation_matrix_matches_rodrigues(self):
        axis = torch.tensor([0.3, -1.0, 2.0], dtype=torch.float64)
        v = random_coil(6, seed=2)
        R = rotation_matrix(axis, 0.7)
        assert torch.allclose(v @ R.T, rodrigues_rotation(v, axis.view(1, 3), 0.7))

    def test_rotation_matrix_is_orthonormal(self):
        R = rotation_matrix(torch.tensor([1.0, 1.0, 1.0], dtype=torch.float64), 2.1)
        assert torch.allclose(R @ R.T, torch.eye(3, dtype=torch.float64))
        assert torch.linalg.det(R).item() == pytest.approx(1.0)

    def test_random_unit_vector(self, generator):
        for _ in range(20):
            assert torch.linalg.norm(random_unit_vector(generator)).item() == pytest.approx(1.0)

    def test_random_rotation_angle_capped(self, generator):
        max_angle = 0.3
        for _ in range(50):
            R = random_rotation_matrix(max_angle, generator)
            # rotation angle from the trace of R
            cos_angle = ((torch.trace(R) - 1) / 2).clamp(-1, 1)
            assert math.acos(cos_angle.item()) <= max_angle + 1e-9


class TestTranslation:

    def test_moves_contiguous_run_by_one_vector(self, params, generator):
        coords = random_coil(11, seed=1)
        for _ in range(50):
            candidate = propose_translation(coords, params, generator)
            moved = changed_rows(coords, candidate)
            if not moved:
                continue
            assert moved == list(range(moved[0], moved[-1] + 1))
            shifts = candidate[moved] - coords[moved]
            assert torch.allclose(shifts, shifts[0].expand_as(shifts))
            assert torch.linalg.norm(shifts[0]).item() <= params.translation_scale + 1e-12

    def test_does_not_modify_input(self, params, generator):
        coords = random_coil(11, seed=1)
        original = coords.clone()
        propose_translation(coords, params, generator)
        assert torch.equal(coords, original)


class TestRotation:

    def test_preserves_segment_lengths(self, params, generator):
        coords = random_coil(11, seed=4)
        for _ in range(50):
            candidate = propose_rotation(coords, params, generator)
            assert torch.allclose(segment_lengths(candidate), segment_lengths(coords))

    def test_rotates_one_side_of_pivot(self, params, generator):
        coords = random_coil(11, seed=4)
        for _ in range(50):
            candidate = propose_rotation(coords, params, generator)
            moved = changed_rows(coords, candidate)
            if not moved:
                continue
            # one end of the chain always moves with the rotated side
            assert moved[0] == 0 or moved[-1] == 10
            assert moved == list(range(moved[0], moved[-1] + 1))

    def test_bounded_by_cone(self, params, generator):
        coords = random_coil(11, seed=4)
        for _ in range(50):
            candidate = propose_rotation(coords, params, generator)
            # a bead at distance r from the pivot moves at most 2*r*sin(a/2)
            span = torch.cdist(coords, coords).max()
            bound = 2 * span * math.sin(params.max_rotation_angle / 2)
            assert torch.linalg.norm(candidate - coords, dim=1).max() <= bound + 1e-12


class TestCrankshaft:

    def test_end_beads_fixed_and_lengths_preserved(self, params, generator):
        coords = random_coil(11, seed=8)
        for _ in range(50):
            candidate = propose_crankshaft(coords, params, generator)
            moved = changed_rows(coords, candidate, atol=1e-9)
            assert torch.allclose(segment_lengths(candidate), segment_lengths(coords))
            if moved:
                # beads outside [i, j] never move, nor do i and j themselves
                assert moved == list(range(moved[0], moved[-1] + 1))
                assert moved[0] >= 1 and moved[-1] <= 9

    def test_degenerate_axis_returns_copy(self, params, generator):
        coords = torch.zeros((11, 3), dtype=torch.float64)
        candidate = propose_crankshaft(coords, params, generator)
        assert torch.equal(candidate, coords)
        assert candidate is not coords


class TestDispatch:

    def test_registry(self):
        assert PROPOSALS[MoveKind.TRANSLATION] is propose_translation
        assert PROPOSALS[MoveKind.ROTATION] is propose_rotation
        assert PROPOSALS[MoveKind.CRANKSHAFT] is propose_crankshaft

    def test_choice_roughly_uniform(self, generator):
        draws = [choose_move(generator) for _ in range(3000)]
        for kind in MoveKind:
            assert 800 < draws.count(kind) < 1200

    def test_kernels_are_reproducible(self, params):
        coords = random_coil(11, seed=9)
        for kind, propose in PROPOSALS.items():
            a = propose(coords, params, torch.Generator().manual_seed(11))
            b = propose(coords, params, torch.Generator().manual_seed(11))
            assert torch.equal(a, b), kind
