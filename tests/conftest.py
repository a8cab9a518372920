import matplotlib

matplotlib.use("Agg")

import pytest
import torch

from ssdna_mc import SimulationConfig, FreelyJointedMCMC


@pytest.fixture
def config():
    return SimulationConfig(seed=1738, verbose=False)


@pytest.fixture
def mcmc(config):
    return FreelyJointedMCMC(config)


@pytest.fixture
def generator():
    return torch.Generator().manual_seed(1738)


def random_coil(n_beads, l_k=1.5, seed=0):
    """Random freely-jointed configuration with unit-ish segments."""
    g = torch.Generator().manual_seed(seed)
    steps = torch.randn((n_beads - 1, 3), generator=g, dtype=torch.float64)
    steps = steps / torch.linalg.norm(steps, dim=1, keepdim=True) * l_k
    coords = torch.zeros((n_beads, 3), dtype=torch.float64)
    coords[1:] = torch.cumsum(steps, dim=0)
    return coords
