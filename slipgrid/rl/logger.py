import csv
import os
from datetime import datetime
from collections import deque
import numpy as np


class RLCSVLogger:
    def __init__(self, path: str, window: int = 50):
        dir_path = os.path.dirname(path)
        if dir_path:
            os.makedirs(dir_path, exist_ok=True)
        self.path = path
        self.window = window
        self.rewards = deque(maxlen=window)

        self.file = open(path, "w", newline="", encoding="utf-8")
        self.writer = csv.writer(self.file)
        self.writer.writerow([
            "episode",
            "reward",
            "mean_reward_50",
            "episode_length",
            "epsilon",
            "outcome",
            "timestamp",
        ])

    def log(self, episode: int, reward: float, length: int, epsilon: float, outcome: str = ""):
        self.rewards.append(float(reward))
        mean_r = float(np.mean(self.rewards))

        self.writer.writerow([
            int(episode),
            round(float(reward), 4),
            round(mean_r, 4),
            int(length),
            round(float(epsilon), 6),
            str(outcome),
            datetime.now().isoformat(timespec="seconds"),
        ])

    def close(self):
        if not self.file.closed:
            self.file.flush()
            self.file.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
