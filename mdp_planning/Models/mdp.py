"""Markov Decision Process model."""

from dataclasses import dataclass, field
from typing import AbstractSet, Callable, Dict, Tuple, List, Hashable, Optional, Set, FrozenSet

from ..errors import MalformedModelError

State = Hashable
Action = Hashable

# Probability sums are compared against 1 with this tolerance.
PROB_TOLERANCE = 1e-9


@dataclass(frozen=True)
class MDP:
    """
    Markov Decision Process.

    states        : list of all states (iteration order used by every sweep)
    A             : mapping from state -> ordered list of enabled actions
    T             : mapping (s, a) -> {s' -> P(s' | s, a)}
    R             : reward function (s, a, s') -> float
    discount      : discount factor gamma in [0, 1)
    initial_state : default start state for simulation
    terminals     : absorbing states; their only action is `noop`
    noop          : the distinguished no-op action

    Distributions are checked lazily, the first time a (s, a) pair is
    queried through `transition`, and the result is memoized. Call
    `validate` to check everything up front.

    The model is immutable once built: fields cannot be reassigned, and the
    `A`/`T` mappings must not be edited after the first query.
    """
    states: List[State]
    A: Dict[State, List[Action]]
    T: Dict[Tuple[State, Action], Dict[State, float]]
    R: Callable[[State, Action, State], float]
    discount: float
    initial_state: State
    terminals: FrozenSet[State] = frozenset()
    noop: Action = None

    _checked: Set[Tuple[State, Action]] = field(
        default_factory=set, init=False, repr=False, compare=False
    )
    _known: FrozenSet[State] = field(
        default=frozenset(), init=False, repr=False, compare=False
    )

    def __post_init__(self):
        object.__setattr__(self, "_known", frozenset(self.states))

    def actions(self, s: State) -> List[Action]:
        """Return the ordered legal actions for `s`."""
        acts = self.A.get(s)
        if not acts:
            raise MalformedModelError(f"State {s!r} has no legal actions")
        return acts

    def transition(self, s: State, a: Action) -> Dict[State, float]:
        """Return {s' -> P(s' | s, a)}; unlisted states have probability 0."""
        try:
            dist = self.T[(s, a)]
        except KeyError:
            raise MalformedModelError(
                f"No transition distribution for state {s!r}, action {a!r}"
            ) from None
        if (s, a) not in self._checked:
            check_distribution(dist, s, a, self._known)
            self._checked.add((s, a))
        return dist

    def reward(self, s: State, a: Action, s_next: State) -> float:
        """Return the reward for the transition s --a--> s_next."""
        return self.R(s, a, s_next)

    def is_terminal(self, s: State) -> bool:
        """Return True if `s` is absorbing."""
        return s in self.terminals

    def validate(self) -> None:
        """Eagerly check every state, action and distribution.

        Raises
        ------
        MalformedModelError
            If any distribution is not stochastic, a state has no actions,
            or a terminal state is not a zero-reward no-op self-loop.
        """
        if self.initial_state not in self._known:
            raise MalformedModelError(
                f"Initial state {self.initial_state!r} is not in states"
            )
        for s in self.states:
            for a in self.actions(s):
                self.transition(s, a)
            if self.is_terminal(s):
                check_absorbing(self, s)


def check_distribution(
    dist: Dict[State, float],
    s: State,
    a: Action,
    known: Optional[AbstractSet[State]] = None,
) -> None:
    """Raise MalformedModelError unless `dist` is a probability distribution.

    If `known` is given, every successor with positive probability must
    belong to it.
    """
    total = 0.0
    for s_next, p in dist.items():
        if p < 0:
            raise MalformedModelError(
                f"Negative probability {p} for ({s!r}, {a!r}) -> {s_next!r}"
            )
        if p > 0 and known is not None and s_next not in known:
            raise MalformedModelError(
                f"Transition ({s!r}, {a!r}) reaches unknown state {s_next!r}"
            )
        total += p
    if abs(total - 1.0) > PROB_TOLERANCE:
        raise MalformedModelError(
            f"Transition ({s!r}, {a!r}) sums to {total}, expected 1"
        )


def check_absorbing(mdp: MDP, s: State) -> None:
    """Check that terminal state `s` is a zero-reward no-op self-loop."""
    if list(mdp.actions(s)) != [mdp.noop]:
        raise MalformedModelError(
            f"Terminal state {s!r} must only allow the no-op action"
        )
    dist = mdp.transition(s, mdp.noop)
    if abs(dist.get(s, 0.0) - 1.0) > PROB_TOLERANCE:
        raise MalformedModelError(f"Terminal state {s!r} must self-loop")
    if mdp.reward(s, mdp.noop, s) != 0:
        raise MalformedModelError(f"Terminal state {s!r} must have zero reward")


def absorbing_transitions(
    terminals: List[State], noop: Action = None
) -> Tuple[Dict[State, List[Action]], Dict[Tuple[State, Action], Dict[State, float]]]:
    """Build the action and transition entries for a list of terminal states."""
    A = {s: [noop] for s in terminals}
    T = {(s, noop): {s: 1.0} for s in terminals}
    return A, T
