from slipgrid.cli import main


def test_run_prints_progress_table_and_trace(capsys):
    assert main(["run", "--episodes", "20", "--seed", "1"]) == 0
    out = capsys.readouterr().out
    assert "--- Q-Table ---" in out
    assert "--- Playing Game with Learned Policy ---" in out
    assert "Step 1: At state (0,0) which is 'S'" in out


def test_run_no_play(capsys):
    main(["run", "--episodes", "5", "--seed", "1", "--no-play"])
    out = capsys.readouterr().out
    assert "--- Q-Table ---" in out
    assert "Playing Game" not in out


def test_plot_history(tmp_path):
    from slipgrid.rl.logger import RLCSVLogger

    hist = tmp_path / "rl_history.csv"
    with RLCSVLogger(str(hist)) as log:
        for ep in range(5):
            log.log(ep, float(ep), 3, 1.0 - ep * 0.1, "goal")
    png = tmp_path / "plot.png"
    main(["plot", str(hist), "--out", str(png)])
    assert png.exists()
