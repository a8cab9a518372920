"""
ssDNA Monte Carlo Simulation Package

Metropolis-Hastings sampling of single-stranded DNA configurations,
modeled as a freely-jointed chain with stretching and bending energy,
optional fixed points, boundary, external force and interaction potential.

Main Components:
---------------
config.SimulationConfig      - Validated configuration
chain.ChainState             - Bead coordinates and fixed points
energy.EnergyModel           - Bonded, constraint and interaction energies
proposals.PROPOSALS          - Translation, rotation and crankshaft moves
markov.FreelyJointedMCMC     - Metropolis-Hastings sampler
analysis.TraceAnalyzer       - Trace statistics
plotting.*                   - Visualization classes

Module Structure:
----------------
├── run.py                  # Example simulation script
└── ssdna_mc/               # Module library files
    ├── config.py           # Configuration and validation
    ├── core.py             # Geometric utilities (Rodrigues rotation, etc.)
    ├── chain.py            # Chain state
    ├── energy.py           # Energy model
    ├── proposals.py        # Proposal kernels
    ├── markov.py           # MCMC sampler
    ├── analysis.py         # Trace analysis tools
    ├── plotting.py         # Visualization classes
    └── __init__.py         # This file

For detailed usage, see run.py.
"""

from .config import SimulationConfig, InvalidConfiguration, StepParameters
from .chain import ChainState
from .energy import EnergyModel, bonded_energy, bond_angle_cosines
from .proposals import MoveKind, PROPOSALS
from .markov import FreelyJointedMCMC, MoveCounter
from .analysis import TraceAnalyzer
from .core import rodrigues_rotation, rotation_matrix
from .plotting import (
    SnapshotPlotter,
    OverlayPlotter,
    ValuePlotter,
    CorrelationPlotter,
    BasePlotter
)

__version__ = "1.0.0"

__all__ = [
    # Configuration
    'SimulationConfig',
    'InvalidConfiguration',
    'StepParameters',

    # Core functionality
    'ChainState',
    'EnergyModel',
    'bonded_energy',
    'bond_angle_cosines',
    'MoveKind',
    'PROPOSALS',
    'FreelyJointedMCMC',
    'MoveCounter',
    'TraceAnalyzer',

    # Geometric utilities
    'rodrigues_rotation',
    'rotation_matrix',

    # Visualization
    'SnapshotPlotter',
    'OverlayPlotter',
    'ValuePlotter',
    'CorrelationPlotter',
    'BasePlotter',
]
