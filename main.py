import argparse
import logging

import torch

from slide2048.game import InvalidConfiguration
from slide2048.simulate import (
    SimulationConfig,
    play_games,
    save_report,
    summarize,
    summary_stats,
)

logger = logging.getLogger(__name__)


def parse_args():
    defaults = SimulationConfig()
    parser = argparse.ArgumentParser(description="Play random 2048 games in batch")
    parser.add_argument("--games", type=int, default=defaults.num_games, help="Games to play")
    parser.add_argument("--envs", type=int, default=defaults.num_envs, help="Grids run in parallel")
    parser.add_argument("--size", type=int, default=defaults.size, help="Grid size")
    parser.add_argument("--max-moves", type=int, default=defaults.max_moves, help="Move cap per game")
    parser.add_argument(
        "--play-past-win",
        action="store_true",
        help="Keep playing after a 2048 tile appears",
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument(
        "--device", type=str, default=None, help="Device to use (cpu, cuda, mps or None for auto)"
    )
    parser.add_argument("--report", type=str, default=None, help="Write a PNG report here")
    return parser, parser.parse_args()


if __name__ == "__main__":
    parser, args = parse_args()
    if args.games < 1 or args.envs < 1:
        parser.error("--games and --envs must be positive")

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    device = args.device
    if device is None:
        device = "cuda" if torch.cuda.is_available() else "cpu"
    logger.info("Using device: %s", device)

    config = SimulationConfig(
        num_games=args.games,
        num_envs=args.envs,
        size=args.size,
        max_moves=args.max_moves,
        stop_on_win=not args.play_past_win,
        seed=args.seed,
        device=device,
    )
    try:
        records = play_games(config)
    except InvalidConfiguration as e:
        parser.error(str(e))

    df = summarize(records)
    stats = summary_stats(df)
    logger.info(
        "%d games, win rate %.1f%%, moves mean %.1f median %.1f, best tile %d",
        stats["games"],
        stats["win_rate"] * 100,
        stats["mean_moves"],
        stats["median_moves"],
        stats["best_tile"],
    )
    for tile, count in stats["highest_tile_counts"].items():
        logger.info("  highest tile %5d: %d games", tile, count)

    if args.report:
        save_report(df, args.report)
