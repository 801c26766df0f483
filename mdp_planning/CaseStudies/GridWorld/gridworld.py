"""Stochastic grid world (the classic 4x3 navigation problem).

Cells are addressed by (x, y) with (0, 0) in the bottom-left corner. Each
free cell becomes an integer state id; coordinates never leave this module.
The agent moves in the intended direction with probability
`intended_prob` and slips to each perpendicular direction with the
remaining probability split evenly. Bumping into a wall or the grid edge
leaves the agent in place.

    y=2  .  .  .  +1
    y=1  .  #  .  -1
    y=0  S  .  .  .
        x=0 1  2  3
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from ...Models import MDP, absorbing_transitions

Coord = Tuple[int, int]

UP = "Up"
RIGHT = "Right"
DOWN = "Down"
LEFT = "Left"
NOOP = None

MOVES: Dict[str, Coord] = {
    UP: (0, 1),
    RIGHT: (1, 0),
    DOWN: (0, -1),
    LEFT: (-1, 0),
}

PERPENDICULAR: Dict[str, Tuple[str, str]] = {
    UP: (LEFT, RIGHT),
    DOWN: (LEFT, RIGHT),
    LEFT: (UP, DOWN),
    RIGHT: (UP, DOWN),
}

ARROWS = {UP: "^", RIGHT: ">", DOWN: "v", LEFT: "<", NOOP: "."}


@dataclass(frozen=True)
class GridWorldConfig:
    """Layout, rewards and dynamics of a grid world.

    The defaults reproduce the textbook 4x3 world.
    """
    width: int = 4
    height: int = 3
    walls: Tuple[Coord, ...] = ((1, 1),)
    terminal_rewards: Tuple[Tuple[Coord, float], ...] = (((3, 2), 1.0), ((3, 1), -1.0))
    start: Coord = (0, 0)
    step_reward: float = -0.04
    intended_prob: float = 0.8
    discount: float = 0.9

    def __post_init__(self):
        if self.width < 1 or self.height < 1:
            raise ValueError(f"Grid must be at least 1x1, got: {self.width}x{self.height}")
        if not 0.0 <= self.intended_prob <= 1.0:
            raise ValueError(f"intended_prob must be in [0, 1], got: {self.intended_prob}")
        for cell in (self.start,) + tuple(c for c, _ in self.terminal_rewards):
            if not self.in_bounds(cell):
                raise ValueError(f"Cell out of bounds: {cell}")
            if cell in self.walls:
                raise ValueError(f"Cell cannot be a wall: {cell}")

    def in_bounds(self, cell: Coord) -> bool:
        return 0 <= cell[0] < self.width and 0 <= cell[1] < self.height


class GridLayout:
    """Bidirectional mapping between grid cells and state ids."""

    def __init__(self, config: GridWorldConfig):
        self.config = config
        self.cells: List[Coord] = [
            (x, y)
            for y in range(config.height)
            for x in range(config.width)
            if (x, y) not in config.walls
        ]
        self._ids: Dict[Coord, int] = {c: i for i, c in enumerate(self.cells)}

    def state_at(self, cell: Coord) -> int:
        """State id of a free cell."""
        return self._ids[cell]

    def coordinates(self, state: int) -> Coord:
        """Cell of a state id."""
        return self.cells[state]

    def move(self, cell: Coord, direction: str) -> Coord:
        """Cell reached by a deterministic move, staying put on collisions."""
        dx, dy = MOVES[direction]
        target = (cell[0] + dx, cell[1] + dy)
        if not self.config.in_bounds(target) or target in self.config.walls:
            return cell
        return target

    def _render(self, cell_text) -> str:
        cfg = self.config
        rows = []
        for y in reversed(range(cfg.height)):
            row = []
            for x in range(cfg.width):
                if (x, y) in cfg.walls:
                    row.append("#".center(7))
                else:
                    row.append(cell_text((x, y)).center(7))
            rows.append("".join(row))
        return "\n".join(rows)

    def render_policy(self, policy: Dict[int, Optional[str]]) -> str:
        """ASCII arrows for a policy; terminal cells show their reward."""
        rewards = dict(self.config.terminal_rewards)

        def text(cell):
            if cell in rewards:
                return f"{rewards[cell]:+g}"
            return ARROWS[policy[self.state_at(cell)]]

        return self._render(text)

    def render_utilities(self, utility: Dict[int, float]) -> str:
        """ASCII table of utilities laid out on the grid."""
        return self._render(lambda cell: f"{utility[self.state_at(cell)]:.3f}")


def build_gridworld_mdp(config: Optional[GridWorldConfig] = None) -> Tuple[MDP, GridLayout]:
    """
    Create the grid world MDP.

    Parameters
    ----------
    config : GridWorldConfig, optional
        Layout and dynamics; defaults to the textbook 4x3 world

    Returns
    -------
    tuple
        (mdp, layout) where layout converts between cells and states
    """
    cfg = config or GridWorldConfig()
    layout = GridLayout(cfg)
    rewards = {layout.state_at(c): r for c, r in cfg.terminal_rewards}
    terminals = list(rewards)
    slip_prob = (1.0 - cfg.intended_prob) / 2.0

    A, T = absorbing_transitions(terminals, NOOP)
    for s, cell in enumerate(layout.cells):
        if s in rewards:
            continue
        A[s] = [UP, RIGHT, DOWN, LEFT]
        for a in A[s]:
            dist: Dict[int, float] = {}
            outcomes = [(a, cfg.intended_prob)] + [(p, slip_prob) for p in PERPENDICULAR[a]]
            for direction, prob in outcomes:
                if prob == 0:
                    continue
                s_next = layout.state_at(layout.move(cell, direction))
                dist[s_next] = dist.get(s_next, 0.0) + prob
            T[(s, a)] = dist

    def reward(s, a, s_next):
        if s in rewards:
            return 0.0
        if s_next in rewards:
            return rewards[s_next]
        return cfg.step_reward

    mdp = MDP(
        states=list(range(len(layout.cells))),
        A=A,
        T=T,
        R=reward,
        discount=cfg.discount,
        initial_state=layout.state_at(cfg.start),
        terminals=frozenset(terminals),
        noop=NOOP,
    )
    return mdp, layout
