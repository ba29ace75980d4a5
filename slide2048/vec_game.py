import torch

from slide2048.game import (
    DEFAULT_SIZE,
    SPAWN_VALUE,
    WIN_TILE,
    Direction,
    InvalidConfiguration,
    NoSpaceAvailable,
)


class VectorizedGame:
    """Runs `num_envs` independent grids with the same rules as `GridEngine`."""

    def __init__(self, num_envs, size=DEFAULT_SIZE, device="cpu", seed=None):
        if size < 2:
            raise InvalidConfiguration(f"grid size must be at least 2, got {size}")
        self.num_envs = num_envs
        self.size = size
        self.device = torch.device(device)
        self.generator = torch.Generator(device=self.device)
        if seed is None:
            self.generator.seed()
        else:
            self.generator.manual_seed(seed)
        self.board = torch.zeros(
            (num_envs, size, size), dtype=torch.int64, device=self.device
        )
        self.reset()

    def set_states(self, env_indices, states):
        if len(env_indices) == 0:
            return
        self.board[env_indices] = torch.as_tensor(states).to(self.device).to(
            self.board.dtype
        )

    def reset(self, env_indices=None):
        if env_indices is None:
            self.board.fill_(0)
            env_indices = torch.arange(self.num_envs, device=self.device)

        if len(env_indices) > 0:
            self.board[env_indices] = 0
            self.add_random_tile(env_indices)
            self.add_random_tile(env_indices)

    def add_random_tile(self, env_indices):
        # env_indices: (K,)
        if len(env_indices) == 0:
            return

        boards = self.board[env_indices]  # (K, S, S)
        flat_boards = boards.view(-1, self.size * self.size)
        empty_mask = flat_boards == 0
        if not empty_mask.any(dim=1).all():
            raise NoSpaceAvailable("no empty cell left to place a tile")

        # uniform over the empty cells of each grid
        flat_indices = torch.multinomial(
            empty_mask.float(), 1, generator=self.generator
        ).squeeze(-1)  # (K,)
        rows = torch.arange(len(flat_indices), device=self.device)
        flat_boards[rows, flat_indices] = SPAWN_VALUE
        self.board[env_indices] = flat_boards.view(-1, self.size, self.size)

    def _settle(self, board, direction: Direction):
        """Sweep `board` (N, S, S) in `direction` until nothing moves, at most `size` times."""
        board = board.clone()
        dx, dy = direction.vector
        order = range(self.size)
        if direction in (Direction.DOWN, Direction.RIGHT):
            order = range(self.size - 1, -1, -1)

        for _ in range(self.size):
            moved = torch.zeros(board.shape[0], dtype=torch.bool, device=board.device)
            for y in order:
                for x in order:
                    fx, fy = x + dx, y + dy
                    if not (0 <= fx < self.size and 0 <= fy < self.size):
                        continue
                    current = board[:, y, x].clone()
                    front = board[:, fy, fx].clone()
                    occupied = current != 0
                    # a slide adds to an empty cell, a merge doubles an equal one
                    step = occupied & ((front == 0) | (front == current))
                    board[:, fy, fx] = torch.where(step, front + current, front)
                    board[:, y, x] = torch.where(
                        step, torch.zeros_like(current), current
                    )
                    moved |= step
            if not moved.any():
                break
        return board

    def get_moves(self):
        """
        Returns a tensor of shape (N, 4, S, S) holding the settled grid for each direction,
        before any tile is spawned. Index i along dim 1 is `Direction(i)`.
        """
        moves = [self._settle(self.board, direction) for direction in Direction]
        return torch.stack(moves, dim=1)

    def step(self, actions, all_next_states=None):
        # actions: (N,)
        if all_next_states is None:
            all_next_states = self.get_moves()  # (N, 4, S, S)

        batch_indices = torch.arange(self.num_envs, device=self.device)
        next_states = all_next_states[batch_indices, actions]  # (N, S, S)

        # a move is valid when it changed the grid; invalid ones leave it as is
        is_valid = (
            next_states.view(self.num_envs, -1) != self.board.view(self.num_envs, -1)
        ).any(dim=1)

        self.board = next_states.clone()

        valid_indices = torch.nonzero(is_valid).squeeze(-1)
        self.add_random_tile(valid_indices)

        return self.board.clone(), is_valid

    def get_valid_actions(self, all_next_states=None):
        # Returns (N, 4) float tensor, 1.0 where the direction changes the grid
        if all_next_states is None:
            all_next_states = self.get_moves()
        current = self.board.unsqueeze(1)
        diff = (all_next_states != current).view(self.num_envs, 4, -1).any(dim=2)
        return diff.float()

    def get_won(self):
        return (self.board == WIN_TILE).view(self.num_envs, -1).any(dim=1)

    def get_lost(self):
        full = (self.board != 0).view(self.num_envs, -1).all(dim=1)
        horizontal = (self.board[:, :, :-1] == self.board[:, :, 1:]).flatten(1).any(1)
        vertical = (self.board[:, :-1, :] == self.board[:, 1:, :]).flatten(1).any(1)
        return full & ~(horizontal | vertical)
