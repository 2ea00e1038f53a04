import os

import matplotlib
import pandas as pd


def plot_history(csv_path, out=None):
    if not os.path.exists(csv_path):
        print(f"[SlipGrid] file not found: {csv_path}")
        return None
    df = pd.read_csv(csv_path)
    if "mean_reward_50" not in df.columns:
        print(f"[SlipGrid] column 'mean_reward_50' not found in {csv_path}")
        return None

    if out:
        matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    fig, (ax_r, ax_e) = plt.subplots(2, 1, figsize=(8, 6), sharex=True)
    ax_r.plot(df["episode"].values, df["mean_reward_50"].values)
    ax_r.set_ylabel("Mean reward (last 50)")
    ax_r.set_title("SlipGrid Q-learning")
    ax_e.plot(df["episode"].values, df["epsilon"].values, color="tab:orange")
    ax_e.set_xlabel("Episode")
    ax_e.set_ylabel("Epsilon")
    fig.tight_layout()

    if out:
        os.makedirs(os.path.dirname(out) or ".", exist_ok=True)
        fig.savefig(out)
        plt.close(fig)
    else:
        plt.show()
    return out
