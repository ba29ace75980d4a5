import sys

from slide2048.game import Direction

# Arrow keys arrive as ESC [ A..D on POSIX terminals and as a 224 prefix on Windows;
# read_key collapses both into these codes.
UP, DOWN, RIGHT, LEFT = "UP", "DOWN", "RIGHT", "LEFT"
QUIT = "QUIT"

KEY_DIRECTIONS = {
    UP: Direction.UP,
    DOWN: Direction.DOWN,
    LEFT: Direction.LEFT,
    RIGHT: Direction.RIGHT,
    "w": Direction.UP,
    "s": Direction.DOWN,
    "a": Direction.LEFT,
    "d": Direction.RIGHT,
    "k": Direction.UP,
    "j": Direction.DOWN,
    "h": Direction.LEFT,
    "l": Direction.RIGHT,
}

_ANSI_ARROWS = {"A": UP, "B": DOWN, "C": RIGHT, "D": LEFT}
_WINDOWS_ARROWS = {72: UP, 80: DOWN, 77: RIGHT, 75: LEFT}


def parse_key(key) -> Direction | None:
    """Map a key from `read_key` to a direction, or None for any other key."""
    if isinstance(key, str) and len(key) == 1:
        key = key.lower()
    return KEY_DIRECTIONS.get(key)


def is_quit(key) -> bool:
    return key == QUIT or key in ("q", "Q", "\x03")


try:
    import termios
except ImportError:
    # Assume windows
    import msvcrt

    def read_key():
        ch = msvcrt.getwch()
        if ch in ("\x00", "\xe0"):
            return _WINDOWS_ARROWS.get(ord(msvcrt.getwch()))
        return ch

else:
    import tty

    def _read_char() -> str:
        fd = sys.stdin.fileno()
        old = termios.tcgetattr(fd)
        try:
            tty.setcbreak(fd)
            return sys.stdin.read(1)
        finally:
            termios.tcsetattr(fd, termios.TCSADRAIN, old)

    def read_key():
        """Return one key press, with arrow escape sequences collapsed to UP/DOWN/LEFT/RIGHT."""
        ch = _read_char()
        if ch == "\x1b":
            if _read_char() == "[":
                return _ANSI_ARROWS.get(_read_char())
            return None
        if ch == "":
            return QUIT
        return ch
