"""Error conditions raised by the MDP model and solvers."""

from typing import Hashable, Optional


class MDPError(Exception):
    """Base class for all mdp_planning errors."""


class InvalidActionError(MDPError, ValueError):
    """An action outside actions(s) was used for state s."""

    def __init__(self, state: Hashable, action: Hashable):
        self.state = state
        self.action = action
        super().__init__(f"Action {action!r} is not legal in state {state!r}")


class InvalidConfigurationError(MDPError, ValueError):
    """A solver or estimator was called with an invalid parameter."""


class MalformedModelError(MDPError, ValueError):
    """The model violates the MDP contract (bad distribution, no actions)."""


class MaxStepsExceededError(MDPError, RuntimeError):
    """A Monte Carlo rollout did not reach a terminal state in time.

    `trial_id` is None when the error reports that every trial of a batch
    was discarded.
    """

    def __init__(
        self,
        trial_id: Optional[int],
        max_steps: int,
        state: Optional[Hashable] = None,
    ):
        self.trial_id = trial_id
        self.max_steps = max_steps
        self.state = state
        if trial_id is None:
            message = f"No trial terminated within {max_steps} steps"
        else:
            message = (
                f"Trial {trial_id} did not terminate within {max_steps} steps "
                f"(last state {state!r})"
            )
        super().__init__(message)
