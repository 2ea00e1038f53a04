import sys
from dataclasses import dataclass, field
from typing import List, Tuple

from slipgrid.rl.agent import QTableAgent
from slipgrid.rl.envs.gridworld import Cell, SlipperyGridWorld
from slipgrid.rl.train_rl import EpisodeOutcome


@dataclass
class PlaybackResult:
    outcome: EpisodeOutcome
    steps: int
    path: List[Tuple[int, int]] = field(default_factory=list)
    actions: List[str] = field(default_factory=list)
    wall_hits: int = 0


def play_policy(agent: QTableAgent, env: SlipperyGridWorld, max_steps: int = 100, out=None) -> PlaybackResult:
    """Walk the greedy policy from the start cell and print every move.

    Moves still slip, so two playbacks of the same table can differ.
    """
    out = out if out is not None else sys.stdout
    print("\n--- Playing Game with Learned Policy ---", file=out)

    state = env.start_state
    result = PlaybackResult(outcome=EpisodeOutcome.STEP_CAP, steps=0, path=[env.index_to_coordinates(state)])

    while result.steps < max_steps:
        r, c = env.index_to_coordinates(state)
        cell = env.cell_at(state)
        print(f"Step {result.steps + 1}: At state ({r},{c}) which is '{cell.value}'", file=out)

        if cell is Cell.GOAL:
            print("Goal reached!", file=out)
            result.outcome = EpisodeOutcome.GOAL
            result.steps += 1
            break
        if cell is Cell.MONSTER:
            print("Oops! Eaten by a monster!", file=out)
            result.outcome = EpisodeOutcome.MONSTER
            result.steps += 1
            break

        action = agent.act(state, epsilon=0.0)
        print(f"  Choosing action: {action.name}", file=out)
        result.actions.append(action.name)

        move = env.step(state, action)
        nr, nc = env.index_to_coordinates(move.next_state)
        print(f"  Moved to state ({nr},{nc}) which is '{env.cell_at(move.next_state).value}'", file=out)
        if move.hit_wall:
            print("  Hit a wall and stayed.", file=out)
            result.wall_hits += 1

        state = move.next_state
        result.path.append((nr, nc))
        result.steps += 1

        if result.steps >= max_steps:
            print("Max steps reached. Did not find goal or monster.", file=out)

    return result
