"""
Unit scaling helpers shared by the text reports.

Times are microseconds and frequencies are Hz on input.
"""


def format_factored_time(time: float, align: int = 8) -> str:
    if time < 1000:
        text = f"{time:.0f}us"
    elif time < 1_000_000:
        text = f"{time / 1000.0:.2f}ms"
    else:
        text = f"{time / 1_000_000.0:.2f}s"
    return text.rjust(align)


def format_factored_freq(freq: int, align: int = 8) -> str:
    if freq < 1_000_000:
        text = f"{freq}Hz"
    elif freq < 1_000_000_000:
        text = f"{freq / 1_000_000.0:.2f}MHz"
    else:
        text = f"{freq / 1_000_000_000.0:.2f}GHz"
    return text.rjust(align)


def format_time_delta(time: float, align: int = 8) -> str:
    """Signed variant of ``format_factored_time``; blank when out of range."""
    magnitude = abs(time)
    if magnitude < 1000:
        text = f"{time:+.0f}us"
    elif magnitude < 1_000_000:
        text = f"{time / 1000.0:+.1f}ms"
    elif magnitude < 100_000_000_000:
        text = f"{time / 1_000_000.0:+.1f}s"
    else:
        text = ""
    return text.rjust(align)


def format_int_delta(value: int, align: int = 5) -> str:
    if value:
        return f"{value:+{align}d}"
    return f"{value:{align}d}"
