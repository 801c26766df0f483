"""Example MDPs built on the Models.MDP contract."""
