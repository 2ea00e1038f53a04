"""Simple CLI with subcommands: run, leaderboard, plot."""

import argparse
import dataclasses
import logging
import os

from slipgrid.utils import QLearnConfig, seed_everything

DEFAULT_CONFIG = os.path.join("configs", "qlearn_default.json")


def load_config(args) -> QLearnConfig:
    cfg_path = getattr(args, "config", DEFAULT_CONFIG)
    if cfg_path and os.path.exists(cfg_path):
        cfg = QLearnConfig.from_json(cfg_path)
    elif cfg_path and cfg_path != DEFAULT_CONFIG:
        raise SystemExit(f"config not found: {cfg_path}")
    else:
        cfg = QLearnConfig()

    overrides = {}
    for name in ("episodes", "seed", "slip_prob", "runs_dir", "run_name"):
        value = getattr(args, name, None)
        if value is not None:
            overrides[name] = value
    return dataclasses.replace(cfg, **overrides) if overrides else cfg


def cmd_run(args):
    from slipgrid.rl.train_rl import train_loop
    from slipgrid.rl.play import play_policy
    from slipgrid.rl.report import format_q_table

    cfg = load_config(args)
    seed_everything(cfg.seed)
    result = train_loop(cfg)
    print(format_q_table(result.q_table))
    if not getattr(args, "no_play", False):
        play_policy(result.agent, result.env, max_steps=cfg.max_steps)


def cmd_leaderboard(args):
    from slipgrid.leaderboard import show_leaderboard
    show_leaderboard(csv_path=args.csv, metric=args.metric)


def cmd_plot(args):
    from slipgrid.plot_rl import plot_history
    plot_history(args.history, out=args.out)


def add_run_args(p):
    p.add_argument('--config', default=DEFAULT_CONFIG)
    p.add_argument('--episodes', type=int, default=None)
    p.add_argument('--seed', type=int, default=None, help='fixed seed for a reproducible run (default: OS entropy)')
    p.add_argument('--slip-prob', type=float, default=None)
    p.add_argument('--runs-dir', default=None, help='write config, rl_history.csv and tensorboard events here')
    p.add_argument('--run-name', default=None)
    p.add_argument('--no-play', action='store_true')


def main(argv=None):
    parser = argparse.ArgumentParser(prog='slipgrid')
    sub = parser.add_subparsers(dest='cmd')

    add_run_args(sub.add_parser('run'))

    p_lb = sub.add_parser('leaderboard')
    p_lb.add_argument('--csv', default='reports/qlearn_results.csv')
    p_lb.add_argument('--metric', default='mean_reward_last_50',
                      choices=['mean_reward_last_50', 'goal_rate_last_100', 'max_reward'])

    p_plot = sub.add_parser('plot')
    p_plot.add_argument('history', help='path to a run rl_history.csv')
    p_plot.add_argument('--out', default=None, help='save the figure instead of showing it')

    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="[%(asctime)s] %(levelname)s:%(name)s: %(message)s")

    if args.cmd == 'run' or args.cmd is None:
        cmd_run(args)
    elif args.cmd == 'leaderboard':
        cmd_leaderboard(args)
    elif args.cmd == 'plot':
        cmd_plot(args)
    else:
        parser.print_help()
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
