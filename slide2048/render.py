import os

from colorama import Fore, Style

from slide2048.game import GridEngine

COLORS = {
    2: Fore.CYAN,
    4: Fore.LIGHTCYAN_EX,
    8: Fore.GREEN,
    16: Fore.YELLOW,
    32: Fore.LIGHTYELLOW_EX,
    64: Fore.MAGENTA,
    128: Fore.LIGHTMAGENTA_EX,
    256: Fore.BLUE,
    512: Fore.LIGHTBLUE_EX,
    1024: Fore.RED,
    2048: Fore.LIGHTRED_EX,
}

_clear = "cls" if os.name == "nt" else "clear"


def get_color(value: int) -> str:
    return COLORS.get(value, Fore.WHITE)


def render(grid, color: bool = True) -> str:
    """
    Return the grid as a boxed table, one 4-wide cell per tile.

    `grid` is a GridEngine or a square sequence of rows.
    """
    rows = grid.rows if isinstance(grid, GridEngine) else grid
    separator = "+----" * len(rows) + "+"
    lines = [separator]
    for row in rows:
        line = ""
        for value in row:
            cell = f"{value:4d}"
            if color:
                cell = get_color(value) + cell + Style.RESET_ALL
            line += "|" + cell
        lines.append(line + "|")
        lines.append(separator)
    return "\n".join(lines)


def draw(engine: GridEngine, color: bool = True, clear: bool = True):
    if clear:
        os.system(_clear)
    print(render(engine, color=color))
