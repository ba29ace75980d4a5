import logging
import os
from dataclasses import asdict, dataclass, field

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import torch

from slide2048.game import DEFAULT_SIZE
from slide2048.vec_game import VectorizedGame

logger = logging.getLogger(__name__)


@dataclass
class SimulationConfig:
    num_games: int = 256
    num_envs: int = 64
    size: int = DEFAULT_SIZE
    max_moves: int = 10000
    stop_on_win: bool = True
    seed: int | None = None
    device: str = "cpu"


@dataclass
class GameRecord:
    moves: int
    highest_tile: int
    tile_sum: int
    won: bool
    lost: bool
    final_board: list[list[int]] = field(repr=False, default_factory=list)


def play_games(config: SimulationConfig) -> list[GameRecord]:
    """Play `config.num_games` games choosing uniformly among the moves that change the grid."""
    num_envs = config.num_envs
    vec_game = VectorizedGame(num_envs, config.size, config.device, config.seed)
    move_counts = torch.zeros(num_envs, dtype=torch.long, device=vec_game.device)

    records: list[GameRecord] = []
    current_step = 0

    while len(records) < config.num_games:
        all_next_states = vec_game.get_moves()
        valid_actions = vec_game.get_valid_actions(all_next_states)

        # Stuck grids are collected below; avoid an all-zero distribution
        valid_actions[valid_actions.sum(dim=1) == 0] = 1.0

        actions = torch.multinomial(
            valid_actions, 1, generator=vec_game.generator
        ).squeeze(1)
        _, is_valid = vec_game.step(actions, all_next_states)
        move_counts += is_valid.long()

        won = vec_game.get_won()
        lost = vec_game.get_lost()
        dones = lost | (move_counts >= config.max_moves)
        if config.stop_on_win:
            dones |= won

        done_indices = torch.nonzero(dones).squeeze(-1)
        if len(done_indices) > 0:
            for env_idx in done_indices.tolist():
                board = vec_game.board[env_idx]
                records.append(
                    GameRecord(
                        moves=int(move_counts[env_idx].item()),
                        highest_tile=int(board.max().item()),
                        tile_sum=int(board.sum().item()),
                        won=bool(won[env_idx].item()),
                        lost=bool(lost[env_idx].item()),
                        final_board=board.cpu().tolist(),
                    )
                )
            move_counts[done_indices] = 0
            vec_game.reset(done_indices)
            logger.debug(
                "step %d: %d games finished (%d/%d)",
                current_step,
                len(done_indices),
                len(records),
                config.num_games,
            )

        current_step += 1
        if current_step % 1000 == 0:
            logger.info(
                "step %d: %d/%d games finished",
                current_step,
                len(records),
                config.num_games,
            )

    return records[: config.num_games]


def summarize(records: list[GameRecord]) -> pd.DataFrame:
    rows = []
    for record in records:
        row = asdict(record)
        row.pop("final_board")
        rows.append(row)
    return pd.DataFrame(
        rows, columns=["moves", "highest_tile", "tile_sum", "won", "lost"]
    )


def summary_stats(df: pd.DataFrame) -> dict:
    if len(df) == 0:
        return {"games": 0}
    tile_counts = df["highest_tile"].value_counts().sort_index()
    return {
        "games": len(df),
        "win_rate": float(df["won"].mean()),
        "mean_moves": float(df["moves"].mean()),
        "median_moves": float(df["moves"].median()),
        "best_tile": int(df["highest_tile"].max()),
        "highest_tile_counts": {int(k): int(v) for k, v in tile_counts.items()},
    }


def save_report(df: pd.DataFrame, out_path: str):
    """Write a PNG with the distribution of game lengths and highest tiles."""
    out_dir = os.path.dirname(out_path)
    if out_dir and not os.path.exists(out_dir):
        os.makedirs(out_dir, exist_ok=True)

    fig, axes = plt.subplots(1, 2, figsize=(10, 4))
    ax_hist, ax_tiles = axes

    ax_hist.set_title("Moves per game")
    if len(df) > 0:
        ax_hist.hist(df["moves"].to_numpy(), bins=20, color="#1f77b4")
        ax_hist.axvline(
            float(np.median(df["moves"])),
            color="red",
            linestyle="--",
            linewidth=1,
            label="median",
        )
        ax_hist.legend(loc="upper right", fontsize=8)
    else:
        ax_hist.text(0.5, 0.5, "no data", ha="center", va="center")
    ax_hist.set_xlabel("moves")
    ax_hist.set_ylabel("count")

    ax_tiles.set_title("Highest tile")
    tile_counts = df["highest_tile"].value_counts().sort_index()
    ax_tiles.bar([str(t) for t in tile_counts.index], tile_counts.to_numpy(), color="#ff7f0e")
    ax_tiles.set_xlabel("tile")
    ax_tiles.set_ylabel("games")

    plt.tight_layout()
    fig.savefig(out_path)
    plt.close(fig)
    logger.info("report written to %s", out_path)
