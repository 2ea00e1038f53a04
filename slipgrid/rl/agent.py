from typing import Optional

import numpy as np

from slipgrid.rl.envs.gridworld import Action, SlipperyGridWorld


class QTableAgent:
    def __init__(
        self,
        env: SlipperyGridWorld,
        gamma: float = 0.9,
        lr: float = 1.0,
        eps_start: float = 1.0,
        eps_min: float = 0.01,
        eps_decay: float = 0.995,
        rng: Optional[np.random.Generator] = None,
    ):
        self.env = env
        self.q_table = np.zeros((env.n_states, env.n_actions), dtype=float)
        self.gamma = float(gamma)
        self.lr = float(lr)
        self.epsilon = float(eps_start)
        self.eps_min = float(eps_min)
        self.eps_decay = float(eps_decay)
        self.action_dim = env.n_actions
        # share the env's generator so a single seed drives the whole run
        self.rng = rng if rng is not None else env.rng

    def greedy_action(self, state: int) -> Action:
        # np.argmax returns the first maximum: ties go to the lowest action
        return Action(int(np.argmax(self.q_table[state])))

    def act(self, state: int, epsilon: Optional[float] = None) -> Action:
        eps = self.epsilon if epsilon is None else float(epsilon)
        if self.rng.random() < eps:
            return Action(int(self.rng.integers(self.action_dim)))
        return self.greedy_action(state)

    def best_next_value(self, state: int) -> float:
        """Max Q over actions from ``state``; 0 for goal and monster cells."""
        if self.env.is_terminal(state):
            return 0.0
        return float(np.max(self.q_table[state]))

    def update(self, state: int, action: Action, reward: float, next_state: int) -> float:
        """Q(s, a) = r + gamma * max_a' Q(s', a').

        With ``lr == 1`` the entry is overwritten by the target; a smaller
        ``lr`` blends it into the previous estimate instead.
        """
        target = float(reward) + self.gamma * self.best_next_value(next_state)
        a = int(action)
        if self.lr >= 1.0:
            self.q_table[state, a] = target
        else:
            self.q_table[state, a] += self.lr * (target - self.q_table[state, a])
        return float(self.q_table[state, a])

    def decay_epsilon(self) -> float:
        if self.epsilon > self.eps_min:
            self.epsilon *= self.eps_decay
        return self.epsilon
