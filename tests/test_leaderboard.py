from slipgrid.leaderboard import build_leaderboard, show_leaderboard, summarize_history_file
from slipgrid.rl.logger import RLCSVLogger
from slipgrid.rl.train_rl import EpisodeOutcome, EpisodeStats, append_results_row


def stats(rewards, outcome=EpisodeOutcome.GOAL):
    return [EpisodeStats(i, r, 3, outcome, 0.5) for i, r in enumerate(rewards)]


def test_results_are_ranked(tmp_path):
    path = str(tmp_path / "qlearn_results.csv")
    append_results_row(path, "weak", stats([-100.0, -50.0]))
    append_results_row(path, "strong", stats([99.0, 99.8]))
    df = build_leaderboard(path)
    assert list(df["run_name"]) == ["strong", "weak"]
    assert df.loc[0, "goal_rate_last_100"] == 1.0


def test_missing_results(tmp_path, capsys):
    assert show_leaderboard(str(tmp_path / "nope.csv"), runs_glob=None, out_path=None) is None
    assert "no results found" in capsys.readouterr().out


def test_history_file_summary(tmp_path):
    path = tmp_path / "run_a" / "rl_history.csv"
    with RLCSVLogger(str(path)) as log:
        log.log(0, -100.0, 2, 0.9, "monster")
        log.log(1, 99.5, 6, 0.8, "goal")
    row = summarize_history_file(str(path))
    assert row["run_name"] == "run_a"
    assert row["episodes"] == 2
    assert row["max_reward"] == 99.5
    assert row["goal_rate_last_100"] == 0.5
    assert row["mean_reward_last_50"] == round((-100.0 + 99.5) / 2, 4)


def test_history_files_fill_in_missing_runs(tmp_path):
    path = tmp_path / "runs" / "orphan" / "rl_history.csv"
    with RLCSVLogger(str(path)) as log:
        log.log(0, 10.0, 2, 0.9, "goal")
    df = build_leaderboard(str(tmp_path / "none.csv"), runs_glob=str(tmp_path / "runs" / "*" / "rl_history.csv"))
    assert list(df["run_name"]) == ["orphan"]
