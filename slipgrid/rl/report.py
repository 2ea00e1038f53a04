import numpy as np

from slipgrid.rl.envs.gridworld import Action


def format_q_table(q_table: np.ndarray) -> str:
    lines = ["", "--- Q-Table ---"]
    names = [a.name.capitalize() for a in Action]
    # the last heading is one column narrower than the values under it
    header = f"{'State':>12}" + "".join(f"{n:>10}" for n in names[:-1]) + f"{names[-1]:>9}"
    lines.append(header)
    for s, row in enumerate(np.asarray(q_table, dtype=float)):
        lines.append(f"{s:>12}" + "".join(f"{v:>10.2f}" for v in row))
    return "\n".join(lines)
