"""Key codes as returned by curses ``getch``."""

import curses

ESC = 27
TAB = 9
CTRL_D = 4
CTRL_U = 21
SPACE = ord(" ")
ENTER = (10, 13, curses.KEY_ENTER)
BACKSPACE = (8, 127, curses.KEY_BACKSPACE)
UP = (curses.KEY_UP, ord("k"))
DOWN = (curses.KEY_DOWN, ord("j"))
PAGE_UP = curses.KEY_PPAGE
PAGE_DOWN = curses.KEY_NPAGE
RESIZE = curses.KEY_RESIZE


def is_printable(key: int) -> bool:
    return 32 <= key <= 126
