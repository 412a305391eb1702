"""
mIRC formatting codes for chat output
"""


class IRCColors:
    """mIRC color numbers (used after the \\x03 control code)"""
    WHITE = "00"
    BLACK = "01"
    BLUE = "02"
    GREEN = "03"
    RED = "04"
    BROWN = "05"
    PURPLE = "06"
    ORANGE = "07"
    YELLOW = "08"
    LTGREEN = "09"
    TEAL = "10"
    LTCYAN = "11"
    LTBLUE = "12"
    PINK = "13"
    GREY = "14"
    LTGREY = "15"


COLOR = "\x03"
RESET = "\x0f"


def colorize(text: str, color: str) -> str:
    """Prefix ``text`` with a color code.

    Text starting with a digit gets a separating space so it is not read as
    part of the color number.
    """
    if text[:1].isdigit():
        text = f" {text}"
    return f"{COLOR}{color}{text}"
