"""
Configuration management for ssDNA MCMC simulation.

This module provides a centralized configuration class that validates
all physical parameters and constraints, derives the chain geometry,
and manages RNG seeding and device allocation.
"""

import math
from dataclasses import dataclass, field
from typing import Callable, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
import scipy.constants as sc
import torch


# User-supplied capabilities injected at construction
BoundaryFn = Callable[[torch.Tensor], bool]
ForceFn = Callable[[torch.Tensor], float]
InteractionFn = Callable[[torch.Tensor], float]
FixedPoint = Tuple[int, Sequence[float]]

FIXED_POINT_MODES = ("overwrite", "reject")

# Boltzmann constant in pN*nm per Kelvin (1 pN*nm = 1e-21 J)
K_B_PN_NM = sc.k / 1e-21


class InvalidConfiguration(ValueError):
    """Raised when a configuration field fails its validation predicate."""

    def __init__(self, field_name: str, message: str):
        self.field = field_name
        super().__init__(f"Invalid '{field_name}': {message}")


@dataclass(frozen=True)
class StepParameters:
    """
    Physical parameters consumed by the proposal kernels.

    Attributes:
        step: Proposal-size tuning parameter
        kT:   Thermal energy (pN*nm)
        k_s:  Stretch modulus (pN/nm)
        k_b:  Bending stiffness (pN*nm)
    """
    step: float
    kT: float
    k_s: float
    k_b: float

    @property
    def translation_scale(self) -> float:
        """
        Largest translation magnitude, before the uniform draw.

        sqrt(step * 2kT/k_s * pi/2) * step, where pi/2 accounts for the
        mean squared projection of a random direction on a segment.
        """
        return math.sqrt(self.step * 2 * self.kT / self.k_s * math.pi / 2) * self.step

    @property
    def max_rotation_angle(self) -> float:
        """Cone half-angle for rotation moves, in (0, 1) radians."""
        return math.tanh(math.sqrt(2 / self.k_b) * self.step * self.step)


@dataclass
class SimulationConfig:
    """
    Central configuration for the freely-jointed-chain ssDNA sampler.

    Every field is validated in __post_init__; a failing predicate raises
    InvalidConfiguration naming the field.

    Attributes:
        l_k: Kuhn length (nm), > 0.2
        k_b: Bending stiffness (pN*nm), > 0
        k_s: Stretch modulus (pN/nm), > 0
        l_b: Length per base (nm), 0 < l_b < 1
        T: Temperature (K), 273.15 < T < 373.15
        bases: Number of bases, integer > 6
        step: Proposal-size tuning parameter, > 0
        initial_coordinates: Starting configuration, shape (N, 3), or None
            for a straight line along z
        fixed_points: Sequence of (base_number, [x, y, z]) anchors, or a
            mapping base_number -> [x, y, z]
        boundary: position -> bool, True inside the allowed region
        force_function: displacement -> energy (pN*nm) per bead
        force_values: Reserved, raises NotImplementedError when used
        interaction_function: configuration -> energy (pN*nm)
        fixed_point_mode: "overwrite" patches fixed beads onto every
            candidate; "reject" also rejects proposals that moved them
        seed: Seed for the sampler's generator (None = random seed)
        device: Device for PyTorch tensors
        verbose: Print diagnostics
    """

    # Physical parameters (ssDNA defaults)
    l_k: float = 1.5    # Kuhn length of ssDNA, nm
    k_b: float = 4.0    # bending energy, pN*nm
    k_s: float = 800.0  # stretch modulus, pN/nm (Smith, Cui, Bustamante 1996)
    l_b: float = 0.5    # length per base, nm
    T: float = 273.15 + 25
    bases: int = 30
    step: float = 3.0   # step size, as an energy ratio to kT

    # Starting configuration and constraints
    initial_coordinates: Optional[Sequence[Sequence[float]]] = None
    fixed_points: Union[Sequence[FixedPoint], Mapping] = ()
    boundary: Optional[BoundaryFn] = None
    force_function: Optional[ForceFn] = None
    force_values: Optional[Callable] = None
    interaction_function: Optional[InteractionFn] = None
    fixed_point_mode: str = "overwrite"

    # Reproducibility and hardware
    seed: Optional[int] = None
    device: str = "cpu"
    verbose: bool = True

    # Private fields (computed in __post_init__)
    _torch_device: torch.device = field(init=False, repr=False)

    def __post_init__(self):
        """Validate every field and initialize derived properties."""
        self._torch_device = torch.device(self.device)

        self._check("l_k", self.l_k > 0.2, "Kuhn length must exceed 0.2 nm")
        self._check("k_b", self.k_b > 0, "bending stiffness must be positive")
        self._check("k_s", self.k_s > 0, "stretch modulus must be positive")
        self._check("l_b", 0 < self.l_b < 1, "length per base must lie in (0, 1) nm")
        self._check("T", 273.15 < self.T < 373.15,
                    "temperature must lie in (273.15, 373.15) K")
        self._check("bases",
                    isinstance(self.bases, (int, np.integer))
                    and not isinstance(self.bases, bool) and self.bases > 6,
                    "number of bases must be an integer greater than 6")
        self._check("step", self.step > 0, "step size must be positive")
        self._check("fixed_point_mode", self.fixed_point_mode in FIXED_POINT_MODES,
                    f"expected one of {FIXED_POINT_MODES}")
        self._check("seed", self.seed is None or isinstance(self.seed, (int, np.integer)),
                    "seed must be an integer or None")

        if isinstance(self.fixed_points, Mapping):
            self.fixed_points = tuple(self.fixed_points.items())

        self._validate_initial_coordinates()
        self._validate_fixed_points()
        self._validate_callables()

    @staticmethod
    def _check(name: str, ok: bool, message: str) -> None:
        if not ok:
            raise InvalidConfiguration(name, message)

    def _validate_initial_coordinates(self) -> None:
        if self.initial_coordinates is None:
            return
        try:
            coords = np.asarray(self.initial_coordinates, dtype=np.float64)
        except (TypeError, ValueError):
            raise InvalidConfiguration("initial_coordinates", "must be numeric")
        self._check("initial_coordinates", coords.ndim == 2 and coords.shape[1] == 3,
                    f"expected shape (N, 3), got {coords.shape}")
        self._check("initial_coordinates", bool(np.all(np.isfinite(coords))),
                    "coordinates must be finite")
        self._check("initial_coordinates", coords.shape[0] >= self.n_beads,
                    f"expected {self.n_beads} Kuhn segments, "
                    f"only {coords.shape[0]} coordinates were specified")

    def _validate_fixed_points(self) -> None:
        for entry in self.fixed_points:
            try:
                base_number, position = entry
                position = np.asarray(position, dtype=np.float64)
            except (TypeError, ValueError):
                raise InvalidConfiguration(
                    "fixed_points", f"expected (base_number, [x, y, z]), got {entry!r}"
                )
            self._check("fixed_points",
                        isinstance(base_number, (int, np.integer))
                        and not isinstance(base_number, bool),
                        f"base number must be an integer, got {base_number!r}")
            self._check("fixed_points", position.shape == (3,),
                        f"position for base {base_number} must have 3 components")
            bead = self.bead_index(base_number)
            self._check("fixed_points", 0 <= bead < self.n_beads,
                        f"base {base_number} maps to bead {bead + 1}, "
                        f"outside 1..{self.n_beads}")

    def _validate_callables(self) -> None:
        origin = torch.zeros(3, dtype=torch.float64, device=self._torch_device)
        pair = torch.tensor([[0.0, 0.0, 0.0], [-10.0, -10.0, -10.0]],
                            dtype=torch.float64, device=self._torch_device)

        if self.boundary is not None:
            self._check("boundary", callable(self.boundary), "must be callable")
            self._check("boundary", _is_boolean(self.boundary(origin)),
                        "must return a boolean at the origin")
        if self.force_function is not None:
            self._check("force_function", callable(self.force_function), "must be callable")
            self._check("force_function", _is_numeric(self.force_function(origin)),
                        "must return a number at the origin")
        if self.force_values is not None:
            self._check("force_values", callable(self.force_values), "must be callable")
            self._check("force_values", _is_numeric(self.force_values(origin)),
                        "must return a number at the origin")
        if self.interaction_function is not None:
            self._check("interaction_function", callable(self.interaction_function),
                        "must be callable")
            self._check("interaction_function", _is_numeric(self.interaction_function(pair)),
                        "must return a number for a two-bead configuration")

    @property
    def torch_device(self) -> torch.device:
        """Get PyTorch device object for tensor allocation."""
        return self._torch_device

    @property
    def contour_length(self) -> float:
        """Contour length L = bases * l_b, in nm."""
        return self.bases * self.l_b

    @property
    def n_beads(self) -> int:
        """
        Number of joints in the freely-jointed chain.

        N = ceil((L - l_b) / l_k) + 1, so the chain has at least as many
        beads as the contour length needs.

        Example:
            >>> SimulationConfig(bases=30).n_beads
            11
        """
        return math.ceil((self.contour_length - self.l_b) / self.l_k) + 1

    @property
    def kT(self) -> float:
        """Thermal energy k_B T in pN*nm."""
        return K_B_PN_NM * self.T

    def bead_index(self, base_number: int) -> int:
        """0-based bead index holding a 1-based base number."""
        return math.ceil(base_number * self.l_b / self.l_k) - 1

    @property
    def fixed_bead_indices(self) -> dict[int, torch.Tensor]:
        """Fixed points as {0-based bead index: position tensor}, later entries win."""
        return {
            self.bead_index(base): torch.as_tensor(
                position, dtype=torch.float64, device=self._torch_device
            )
            for base, position in self.fixed_points
        }

    @property
    def step_parameters(self) -> StepParameters:
        return StepParameters(step=self.step, kT=self.kT, k_s=self.k_s, k_b=self.k_b)

    def make_generator(self) -> torch.Generator:
        """
        Create the random generator owned by one sampler.

        Seeded from `seed` for reproducibility; a fresh non-deterministic
        seed is drawn when `seed` is None.
        """
        generator = torch.Generator(device=self._torch_device)
        if self.seed is None:
            generator.seed()
        else:
            generator.manual_seed(int(self.seed))
            if self.verbose:
                print(f"🌱 Sampler seed set to: {self.seed}")
        return generator

    def __repr__(self) -> str:
        """Formatted string representation of configuration."""
        return (
            f"SimulationConfig(\n"
            f"  bases={self.bases}, l_b={self.l_b}, l_k={self.l_k}, N={self.n_beads}\n"
            f"  k_b={self.k_b}, k_s={self.k_s}, T={self.T}, kT={self.kT:.4f}\n"
            f"  step={self.step}, fixed_points={len(self.fixed_points)}, "
            f"mode={self.fixed_point_mode}\n"
            f"  seed={self.seed}, device={self.device}\n"
            f")"
        )


def _is_boolean(value) -> bool:
    if isinstance(value, (bool, np.bool_)):
        return True
    if isinstance(value, torch.Tensor):
        return value.dtype == torch.bool and value.numel() == 1
    if isinstance(value, np.ndarray):
        return value.dtype == np.bool_ and value.size == 1
    return False


def _is_numeric(value) -> bool:
    if isinstance(value, (bool, np.bool_)):
        return False
    if isinstance(value, (int, float, np.number)):
        return True
    if isinstance(value, torch.Tensor):
        return value.numel() == 1 and value.dtype != torch.bool
    if isinstance(value, np.ndarray):
        return value.size == 1 and np.issubdtype(value.dtype, np.number)
    return False
