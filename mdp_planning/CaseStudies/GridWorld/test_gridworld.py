"""Tests for the grid world case study."""

import pytest

from .gridworld import (
    GridWorldConfig,
    GridLayout,
    build_gridworld_mdp,
    UP,
    RIGHT,
    DOWN,
    LEFT,
)


@pytest.fixture
def world():
    return build_gridworld_mdp()


class TestLayout:

    def test_walls_are_not_states(self, world):
        mdp, layout = world
        assert len(mdp.states) == 11
        assert (1, 1) not in layout.cells

    def test_cell_state_round_trip(self, world):
        mdp, layout = world
        for s in mdp.states:
            assert layout.state_at(layout.coordinates(s)) == s

    def test_state_ids(self, world):
        mdp, layout = world
        assert mdp.initial_state == layout.state_at((0, 0)) == 0
        assert layout.state_at((3, 1)) == 6
        assert layout.state_at((3, 2)) == 10

    def test_move_blocked_by_wall_and_edge(self):
        layout = GridLayout(GridWorldConfig())
        assert layout.move((0, 1), RIGHT) == (0, 1)
        assert layout.move((0, 0), LEFT) == (0, 0)
        assert layout.move((0, 0), UP) == (0, 1)


class TestDynamics:

    def test_intended_and_slip_probabilities(self, world):
        mdp, layout = world
        dist = mdp.transition(layout.state_at((0, 1)), UP)
        # Left slip bumps the edge, right slip bumps the wall.
        assert dist == {
            layout.state_at((0, 2)): pytest.approx(0.8),
            layout.state_at((0, 1)): pytest.approx(0.2),
        }

    def test_slips_are_perpendicular(self, world):
        mdp, layout = world
        dist = mdp.transition(layout.state_at((2, 1)), UP)
        assert dist[layout.state_at((2, 2))] == pytest.approx(0.8)
        assert dist[layout.state_at((3, 1))] == pytest.approx(0.1)
        assert dist[layout.state_at((2, 1))] == pytest.approx(0.1)

    def test_actions_in_order(self, world):
        mdp, _ = world
        assert mdp.actions(mdp.initial_state) == [UP, RIGHT, DOWN, LEFT]

    def test_rewards(self, world):
        mdp, layout = world
        goal, pit = layout.state_at((3, 2)), layout.state_at((3, 1))
        near_goal = layout.state_at((2, 2))
        assert mdp.reward(near_goal, RIGHT, goal) == 1.0
        assert mdp.reward(layout.state_at((2, 1)), RIGHT, pit) == -1.0
        assert mdp.reward(near_goal, LEFT, layout.state_at((1, 2))) == pytest.approx(-0.04)
        assert mdp.reward(goal, None, goal) == 0.0

    def test_deterministic_world(self):
        mdp, layout = build_gridworld_mdp(GridWorldConfig(intended_prob=1.0))
        assert mdp.transition(0, RIGHT) == {layout.state_at((1, 0)): 1.0}
        mdp.validate()


class TestConfig:

    @pytest.mark.parametrize("kwargs", [
        {"width": 0},
        {"intended_prob": 1.2},
        {"start": (1, 1)},
        {"start": (5, 0)},
        {"terminal_rewards": (((4, 4), 1.0),)},
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            GridWorldConfig(**kwargs)

    def test_custom_layout(self):
        cfg = GridWorldConfig(width=3, height=1, walls=(), terminal_rewards=(((2, 0), 1.0),))
        mdp, _ = build_gridworld_mdp(cfg)
        mdp.validate()
        assert len(mdp.states) == 3
        assert mdp.terminals == frozenset([2])


class TestRendering:

    def test_render_policy(self, world):
        mdp, layout = world
        policy = {s: (None if mdp.is_terminal(s) else UP) for s in mdp.states}
        lines = layout.render_policy(policy).splitlines()
        assert len(lines) == 3
        assert "+1" in lines[0]
        assert "-1" in lines[1]
        assert "#" in lines[1]
        assert lines[2].split() == ["^", "^", "^", "^"]

    def test_render_utilities(self, world):
        mdp, layout = world
        text = layout.render_utilities({s: 0.5 for s in mdp.states})
        assert text.count("0.500") == 11
