"""
Human readable formatting helpers.

Used by Metric.humanize_value to render sink values for display.
"""

NANOSECOND = 1
MICROSECOND = 1000 * NANOSECOND
MILLISECOND = 1000 * MICROSECOND
SECOND = 1000 * MILLISECOND
MINUTE = 60 * SECOND
HOUR = 60 * MINUTE

_BYTE_SIZES = ["B", "kB", "MB", "GB", "TB", "PB", "EB"]


def format_float(value: float) -> str:
    """Render a float with up to six decimals, trailing zeros stripped"""
    text = f"{value:.6f}"
    text = text.rstrip("0")
    return text.rstrip(".")


def format_bytes(size: int) -> str:
    """Render a byte count with SI (base 1000) units, e.g. 1.2 kB"""
    if size < 10:
        return f"{size} B"

    exponent = 0
    scaled = float(size)
    while scaled >= 1000 and exponent < len(_BYTE_SIZES) - 1:
        scaled /= 1000
        exponent += 1

    value = int(size / 1000**exponent * 10 + 0.5) / 10
    if value < 10:
        return f"{value:.1f} {_BYTE_SIZES[exponent]}"
    return f"{value:.0f} {_BYTE_SIZES[exponent]}"


def _format_fraction(value: int, precision: int) -> str:
    """Render value / 10**precision, dropping trailing zeros of the fraction"""
    whole, fraction = divmod(value, 10**precision)
    digits = f"{fraction:0{precision}d}".rstrip("0")
    if digits:
        return f"{whole}.{digits}"
    return str(whole)


def format_duration(nanoseconds: int) -> str:
    """
    Render a nanosecond count in duration notation.

    Examples: 800ns, 1.5µs, 12.34ms, 1.23s, 1m5s, 2h0m1s
    """
    if nanoseconds == 0:
        return "0s"

    sign = "-" if nanoseconds < 0 else ""
    ns = abs(nanoseconds)

    if ns < MICROSECOND:
        return f"{sign}{ns}ns"
    if ns < MILLISECOND:
        return f"{sign}{_format_fraction(ns, 3)}µs"
    if ns < SECOND:
        return f"{sign}{_format_fraction(ns, 6)}ms"

    hours, rest = divmod(ns, HOUR)
    minutes, rest = divmod(rest, MINUTE)
    text = f"{_format_fraction(rest, 9)}s"
    if hours or minutes:
        text = f"{minutes}m{text}"
    if hours:
        text = f"{hours}h{text}"
    return sign + text


def round_duration(nanoseconds: int) -> int:
    """Drop precision that is not meaningful at the duration's magnitude"""
    if nanoseconds > MINUTE:
        return nanoseconds - nanoseconds % SECOND
    if nanoseconds > SECOND:
        return nanoseconds - nanoseconds % (10 * MILLISECOND)
    if nanoseconds > MILLISECOND:
        return nanoseconds - nanoseconds % (10 * MICROSECOND)
    if nanoseconds > MICROSECOND:
        return nanoseconds - nanoseconds % (10 * NANOSECOND)
    return nanoseconds


def format_rate(value: float) -> str:
    """Render a ratio as a percentage truncated to two decimals"""
    return f"{int(value * 100 * 100) / 100:.2f}%"
