import os
import sys
import csv
import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple

import numpy as np
from torch.utils.tensorboard import SummaryWriter

from slipgrid.rl.envs.gridworld import Grid, SlipperyGridWorld
from slipgrid.rl.agent import QTableAgent
from slipgrid.rl.logger import RLCSVLogger
from slipgrid.utils import QLearnConfig, ensure_dir, make_rng, save_json


logger = logging.getLogger("slipgrid.train")

RESULT_FIELDS = [
    "timestamp",
    "run_name",
    "episodes",
    "mean_reward_last_50",
    "max_reward",
    "min_reward",
    "goal_rate_last_100",
]


class EpisodeOutcome(Enum):
    GOAL = "goal"
    MONSTER = "monster"
    STEP_CAP = "step_cap"


@dataclass
class EpisodeStats:
    episode: int
    reward: float
    length: int
    outcome: EpisodeOutcome
    epsilon: float


@dataclass
class TrainResult:
    agent: QTableAgent
    env: SlipperyGridWorld
    history: List[EpisodeStats] = field(default_factory=list)
    run_dir: Optional[str] = None

    @property
    def q_table(self) -> np.ndarray:
        return self.agent.q_table


def build_env(cfg: QLearnConfig, rng: Optional[np.random.Generator] = None) -> SlipperyGridWorld:
    rng = rng if rng is not None else make_rng(cfg.seed)
    return SlipperyGridWorld(Grid(cfg.layout, start=cfg.start), slip_prob=cfg.slip_prob, rng=rng)


def build_agent(cfg: QLearnConfig, env: SlipperyGridWorld, rng: Optional[np.random.Generator] = None) -> QTableAgent:
    return QTableAgent(
        env,
        gamma=cfg.gamma,
        lr=cfg.lr,
        eps_start=cfg.eps_start,
        eps_min=cfg.eps_min,
        eps_decay=cfg.eps_decay,
        rng=rng if rng is not None else env.rng,
    )


def build(cfg: QLearnConfig, rng: Optional[np.random.Generator] = None) -> Tuple[SlipperyGridWorld, QTableAgent]:
    env = build_env(cfg, rng=rng)
    return env, build_agent(cfg, env)


def outcome_of(env: SlipperyGridWorld, state: int) -> EpisodeOutcome:
    if not env.is_terminal(state):
        return EpisodeOutcome.STEP_CAP
    return EpisodeOutcome.GOAL if env.reward_for(state) > 0 else EpisodeOutcome.MONSTER


def run_episode(env: SlipperyGridWorld, agent: QTableAgent, max_steps: int = 100) -> Tuple[EpisodeOutcome, float, int]:
    """One epsilon-greedy episode from the start cell, updating the Q-table after every move."""
    state = env.start_state
    ep_reward = 0.0
    steps = 0

    while steps < max_steps:
        # no action is ever taken from a goal or monster cell
        if env.is_terminal(state):
            break
        action = agent.act(state)
        next_state = env.resolve_transition(state, action)
        reward = env.reward_for(next_state)
        agent.update(state, action, reward, next_state)

        ep_reward += reward
        state = next_state
        steps += 1

    return outcome_of(env, state), ep_reward, steps


def _unique_run_dir(runs_dir: str, run_name: str) -> str:
    run_dir = os.path.join(runs_dir, run_name)
    if os.path.exists(run_dir):
        ts = datetime.now().strftime("%Y%m%d_%H%M%S")
        run_dir = f"{run_dir}_{ts}"
    return run_dir


def append_results_row(path: str, run_name: str, history: List[EpisodeStats]) -> dict:
    rewards = [h.reward for h in history]
    last_100 = history[-100:]
    row = {
        "timestamp": datetime.now().isoformat(timespec="seconds"),
        "run_name": run_name,
        "episodes": len(history),
        "mean_reward_last_50": float(np.mean(rewards[-50:])) if rewards else float("nan"),
        "max_reward": float(max(rewards)) if rewards else float("nan"),
        "min_reward": float(min(rewards)) if rewards else float("nan"),
        "goal_rate_last_100": (
            sum(h.outcome is EpisodeOutcome.GOAL for h in last_100) / len(last_100) if last_100 else float("nan")
        ),
    }

    ensure_dir(os.path.dirname(path) or ".")
    write_header = not os.path.exists(path)
    with open(path, "a", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=RESULT_FIELDS)
        if write_header:
            w.writeheader()
        w.writerow(row)
    return row


def train_loop(
    cfg: QLearnConfig,
    env: Optional[SlipperyGridWorld] = None,
    agent: Optional[QTableAgent] = None,
    rng: Optional[np.random.Generator] = None,
    out=None,
) -> TrainResult:
    out = out if out is not None else sys.stdout
    if agent is not None:
        env = agent.env if env is None else env
    else:
        env = env if env is not None else build_env(cfg, rng=rng)
        agent = build_agent(cfg, env, rng=rng)

    run_dir = None
    history_log = None
    writer = None
    if cfg.runs_dir:
        run_dir = _unique_run_dir(cfg.runs_dir, cfg.run_name)
        try:
            ensure_dir(run_dir)
            cfg_out = cfg.to_dict()
            cfg_out["effective_run_dir"] = run_dir
            save_json(os.path.join(run_dir, "config.json"), cfg_out)
            history_log = RLCSVLogger(os.path.join(run_dir, "rl_history.csv"))
            if cfg.tensorboard:
                writer = SummaryWriter(run_dir)
            logger.info("logging run to %s", run_dir)
        except OSError:
            logger.exception("Failed to set up run directory %s; training without run logs", run_dir)
            if history_log is not None:
                history_log.close()
            history_log = writer = run_dir = None

    result = TrainResult(agent=agent, env=env, run_dir=run_dir)
    try:
        for ep in range(cfg.episodes):
            outcome, ep_reward, length = run_episode(env, agent, cfg.max_steps)
            epsilon = agent.decay_epsilon()
            result.history.append(EpisodeStats(ep, ep_reward, length, outcome, epsilon))

            if history_log is not None:
                history_log.log(episode=ep, reward=ep_reward, length=length, epsilon=epsilon, outcome=outcome.value)
            if writer is not None:
                writer.add_scalar("reward/episode", ep_reward, ep)
                writer.add_scalar("length/episode", length, ep)
                writer.add_scalar("epsilon", epsilon, ep)

            if cfg.log_every and (ep + 1) % cfg.log_every == 0:
                print(f"Episode {ep + 1}/{cfg.episodes} completed. Epsilon: {epsilon:g}", file=out)
    finally:
        if history_log is not None:
            history_log.close()
        if writer is not None:
            writer.close()

    if run_dir is not None:
        results_path = os.path.join(cfg.reports_dir, "qlearn_results.csv")
        try:
            append_results_row(results_path, cfg.run_name, result.history)
        except OSError:
            logger.exception("Failed to append results row to %s", results_path)

    goals = sum(h.outcome is EpisodeOutcome.GOAL for h in result.history)
    logger.info("training done | episodes=%d goals=%d epsilon=%.6f", len(result.history), goals, agent.epsilon)
    return result
