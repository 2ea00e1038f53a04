import argparse
import glob
import os

import pandas as pd

from slipgrid.rl.train_rl import RESULT_FIELDS


def summarize_history_file(path):
    """Build a results row from a per-episode rl_history.csv."""
    d = pd.read_csv(path)
    if "reward" not in d.columns or d.empty:
        return None
    rewards = d["reward"].astype(float)

    if "mean_reward_50" in d.columns:
        mean_last_50 = float(d["mean_reward_50"].iloc[-1])
    else:
        mean_last_50 = float(rewards.tail(50).mean())

    goal_rate = float("nan")
    if "outcome" in d.columns:
        goal_rate = float((d["outcome"].tail(100) == "goal").mean())

    ts = str(d["timestamp"].iloc[-1]) if "timestamp" in d.columns else ""
    return {
        "timestamp": ts,
        "run_name": os.path.basename(os.path.dirname(os.path.abspath(path))),
        "episodes": len(rewards),
        "mean_reward_last_50": mean_last_50,
        "max_reward": float(rewards.max()),
        "min_reward": float(rewards.min()),
        "goal_rate_last_100": goal_rate,
    }


def build_leaderboard(csv_path="reports/qlearn_results.csv", metric="mean_reward_last_50", runs_glob=None):
    rows = []
    if os.path.exists(csv_path):
        df = pd.read_csv(csv_path)
        if metric in df.columns:
            rows.extend(df.to_dict(orient="records"))

    # runs without a results row (e.g. interrupted) still have their history file
    if runs_glob:
        seen = {r.get("run_name") for r in rows}
        for p in sorted(glob.glob(runs_glob)):
            s = summarize_history_file(p)
            if s and s["run_name"] not in seen:
                rows.append(s)

    if not rows:
        return None
    df_out = pd.DataFrame(rows)
    cols = [c for c in RESULT_FIELDS if c in df_out.columns]
    return df_out[cols].sort_values(by=metric, ascending=False).reset_index(drop=True)


def show_leaderboard(csv_path="reports/qlearn_results.csv", metric="mean_reward_last_50",
                     runs_glob=os.path.join("runs", "*", "rl_history.csv"), out_path="reports/leaderboard_qlearn.csv"):
    df_out = build_leaderboard(csv_path, metric, runs_glob)
    if df_out is None:
        print(f"[SlipGrid] no results found in {csv_path}")
        return None

    print("\n[SlipGrid] LEADERBOARD")
    print(df_out.to_string(index=False))

    if out_path:
        os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
        df_out.to_csv(out_path, index=False)
        print(f"\n[SlipGrid] leaderboard saved to {out_path}")
    return df_out


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--csv", default="reports/qlearn_results.csv")
    parser.add_argument("--metric", default="mean_reward_last_50")
    args = parser.parse_args()
    show_leaderboard(args.csv, args.metric)


if __name__ == "__main__":
    main()
