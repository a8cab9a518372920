"""
Metropolis-Hastings Markov chain Monte Carlo for a freely-jointed ssDNA chain.

Each step proposes a translation, rotation or crankshaft move, scores the
candidate with the energy model and accepts it with probability

    min(1, exp(-(U + U_i + U_f - current_energy) / kT))

where U is the bonded energy, U_i the interaction energy and U_f the
constraint energy of the candidate. current_energy stores U + U_i of the
last accepted configuration only: U_f may be infinite (boundary) or depend
on the displacement from the accepted state (force field), so it is a
per-step quantity and never part of the stored energy. Do not fold U_f
into current_energy.

Every step appends the current configuration to the trace, whether or not
the proposal was accepted.
"""

import math
from numbers import Integral
from typing import Dict, List, Optional

import torch

from .chain import ChainState
from .config import SimulationConfig
from .energy import EnergyModel
from .proposals import MOVE_KINDS, PROPOSALS, MoveKind, choose_move


class MoveCounter:
    """Proposed and accepted tallies per move kind."""

    def __init__(self):
        self.proposed: Dict[MoveKind, int] = {}
        self.accepted: Dict[MoveKind, int] = {}
        self.reset()

    def reset(self) -> None:
        self.proposed = {kind: 0 for kind in MOVE_KINDS}
        self.accepted = {kind: 0 for kind in MOVE_KINDS}

    @property
    def total_proposed(self) -> int:
        return sum(self.proposed.values())

    @property
    def total_accepted(self) -> int:
        return sum(self.accepted.values())

    def ratio(self, kind: Optional[MoveKind] = None) -> float:
        """Accepted/proposed in percent; nan when nothing was proposed."""
        if kind is None:
            proposed, accepted = self.total_proposed, self.total_accepted
        else:
            proposed, accepted = self.proposed[kind], self.accepted[kind]
        if proposed == 0:
            return math.nan
        return accepted / proposed * 100


class FreelyJointedMCMC:
    """
    Metropolis-Hastings sampler of freely-jointed ssDNA configurations.

    Owns the chain state, the energy model, a seeded torch.Generator,
    the move counters and the append-only trace. Independent instances
    share no state.

    Attributes:
        config:         Validated simulation configuration
        chain:          ChainState (initial/current coordinates, fixed points)
        energy_model:   EnergyModel bound to the config
        count:          MoveCounter
        proposal:       Kind of the most recent proposal (None before the first)
        current_energy: U + U_i of the last accepted configuration, 0 at
                        construction and after reset_all(). Excludes the
                        constraint energy U_f, which the acceptance test
                        adds for the candidate only.
    """

    def __init__(self, config: SimulationConfig):
        """
        Initialize sampler.

        Args:
            config: Simulation configuration
        """
        self.config = config
        self._device = config.torch_device
        self.kT = config.kT
        self.params = config.step_parameters

        self.chain = ChainState(config)
        self.energy_model = EnergyModel.from_config(config)
        self.generator = config.make_generator()

        self.count = MoveCounter()
        self.proposal: Optional[MoveKind] = None
        self.current_energy = 0.0
        self._trace: List[torch.Tensor] = []

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def n_beads(self) -> int:
        return self.chain.n_beads

    @property
    def current_coords(self) -> torch.Tensor:
        """Current (last accepted) configuration, shape (N, 3)."""
        return self.chain.current

    @property
    def initial_coordinates(self) -> torch.Tensor:
        """Starting configuration, shape (N, 3)."""
        return self.chain.initial

    @property
    def trace(self) -> List[torch.Tensor]:
        """Recorded configurations, one (N, 3) tensor per step."""
        return self._trace

    @property
    def coordinates(self) -> torch.Tensor:
        """Trace stacked into shape (T, N, 3)."""
        if not self._trace:
            return torch.empty((0, self.n_beads, 3), dtype=torch.float64, device=self._device)
        return torch.stack(self._trace)

    # ------------------------------------------------------------------
    # Sampling primitives
    # ------------------------------------------------------------------

    def propose(self, kind: Optional[MoveKind] = None, return_displaced: bool = False):
        """
        Propose a move and return the candidate configuration.

        The move kind is drawn uniformly unless given. Its proposed counter
        is incremented whatever happens to the candidate. Fixed beads of the
        candidate always hold their assigned positions.

        Args:
            kind:             Force a particular move kind
            return_displaced: Also return whether the raw move displaced a
                              fixed bead (only meaningful in "reject" mode)

        Returns:
            Candidate configuration, shape (N, 3), or (candidate, displaced)
        """
        if kind is None:
            kind = choose_move(self.generator, device=self._device)
        kind = MoveKind(kind)

        self.proposal = kind
        self.count.proposed[kind] += 1

        raw = PROPOSALS[kind](self.chain.current, self.params, self.generator)
        candidate, displaced = self.chain.constrain(raw)
        if return_displaced:
            return candidate, displaced
        return candidate

    def evaluate(self, candidate: torch.Tensor,
                 displaced_fixed: bool = False) -> tuple[float, float]:
        """
        Score a candidate against the current configuration.

        Args:
            candidate:       Configuration to score, shape (N, 3)
            displaced_fixed: The move that produced the candidate displaced a
                             fixed bead; scores U_f = +inf

        Returns:
            state_energy:      U + U_i of the candidate
            constraint_energy: U_f of the candidate (may be +inf)
        """
        U = self.energy_model.bonded(candidate)
        U_i = self.energy_model.interaction(candidate)
        U_f = self.energy_model.constraint(candidate, self.chain.current)
        if displaced_fixed:
            U_f = math.inf
        return U + U_i, U_f

    def acceptance_probability(self, state_energy: float, constraint_energy: float) -> float:
        """
        Metropolis acceptance probability of a scored candidate.

        Exactly 0 for infinite constraint energy and exactly 1 when the
        candidate's total energy does not exceed current_energy.
        """
        if math.isinf(constraint_energy) and constraint_energy > 0:
            return 0.0
        delta = state_energy + constraint_energy - self.current_energy
        if delta <= 0:
            return 1.0
        return math.exp(-delta / self.kT)

    def accept(self, candidate: torch.Tensor, state_energy: float) -> None:
        """
        Make `candidate` the current configuration.

        Args:
            candidate:    Accepted configuration
            state_energy: U + U_i of the candidate, without constraint energy
        """
        self.chain.current = candidate
        self.current_energy = state_energy
        if self.proposal is not None:
            self.count.accepted[self.proposal] += 1

    def sample(self) -> None:
        """Append the current configuration to the trace."""
        self._trace.append(self.chain.current.clone())

    def step(self) -> bool:
        """
        Run one propose / evaluate / accept-or-reject / record cycle.

        Returns:
            True if the proposal was accepted
        """
        r = float(torch.rand((), generator=self.generator, dtype=torch.float64,
                             device=self._device))
        candidate, displaced = self.propose(return_displaced=True)
        state_energy, constraint_energy = self.evaluate(candidate, displaced_fixed=displaced)

        accepted = r < self.acceptance_probability(state_energy, constraint_energy)
        if accepted:
            self.accept(candidate, state_energy)
        self.sample()
        return accepted

    def run(self, samples: int) -> None:
        """
        Run the sampler for a fixed number of steps.

        Args:
            samples: Number of steps; the trace grows by exactly this many
        """
        for _ in range(int(samples)):
            self.step()

    # ------------------------------------------------------------------
    # Bookkeeping
    # ------------------------------------------------------------------

    def thin(self, thinning: int) -> None:
        """
        Keep every `thinning`-th sample, starting with sample `thinning`.

        Destructive: the trace of length L becomes floor(L / thinning)
        entries taken at (1-based) positions thinning, 2*thinning, ...
        """
        if isinstance(thinning, bool) or not isinstance(thinning, Integral) or thinning < 1:
            raise ValueError(f"thinning must be a positive integer, got {thinning!r}")
        self._trace = self._trace[thinning - 1::thinning]

    def reset_all(self) -> None:
        """Clear samples and counters and restore the initial configuration."""
        self._trace = []
        self.chain.reset()
        self.current_energy = 0.0
        self.count.reset()
        self.proposal = None

    def acceptance_ratios(self) -> Dict[str, float]:
        """
        Acceptance percentages, overall and per move kind.

        A kind that was never proposed reports nan.

        Returns:
            {"overall": ..., "translation": ..., "rotation": ..., "crankshaft": ...}
        """
        ratios = {"overall": self.count.ratio()}
        for kind in MOVE_KINDS:
            ratios[kind.value] = self.count.ratio(kind)

        if self.config.verbose:
            print(f"Overall: {ratios['overall']:.2f}% accepted")
            for kind in MOVE_KINDS:
                print(f"{kind.value.capitalize()}s: {ratios[kind.value]:.2f}% accepted")
        return ratios
