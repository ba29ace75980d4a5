import argparse
import logging
import random

from colorama import just_fix_windows_console

from slide2048.game import DEFAULT_SIZE, GridEngine, InvalidConfiguration
from slide2048.keys import is_quit, parse_key, read_key
from slide2048.render import draw

logger = logging.getLogger(__name__)


def parse_args():
    parser = argparse.ArgumentParser(description="2048 in your terminal")
    parser.add_argument("--size", type=int, default=DEFAULT_SIZE, help="Grid size")
    parser.add_argument("--seed", type=int, default=None, help="Seed for tile placement")
    parser.add_argument("--no-color", action="store_true", help="Plain text tiles")
    parser.add_argument(
        "--no-clear", action="store_true", help="Do not clear the screen between moves"
    )
    parser.add_argument("--verbose", action="store_true", help="Log engine events")
    return parser, parser.parse_args()


def read_direction():
    """Block until a direction key is pressed. Returns None when the player quits."""
    while True:
        key = read_key()
        if is_quit(key):
            return None
        direction = parse_key(key)
        if direction is not None:
            return direction


if __name__ == "__main__":
    parser, args = parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    just_fix_windows_console()

    rng = random.Random(args.seed) if args.seed is not None else None
    try:
        game = GridEngine(args.size, rng=rng)
    except InvalidConfiguration as e:
        parser.error(str(e))

    color = not args.no_color
    clear = not args.no_clear
    draw(game, color=color, clear=clear)

    try:
        while True:
            direction = read_direction()
            if direction is None:
                break
            game.move(direction)
            draw(game, color=color, clear=clear)

            if game.is_lost():
                print("You lose")
                break
            elif game.is_won():
                print("You win")
                break
    except KeyboardInterrupt:
        pass
    logger.info("game over, highest tile %d\n%s", game.highest_tile(), game)
