from datetime import datetime

CANONICAL_FORMAT = "%Y_%m_%d_%H%M%S"
DISPLAY_FORMAT = "%Y-%m-%d %I:%M:%S %p"


def local_now():
    """
    Naive local datetime, same representation as parsed feed timestamps
    """
    return datetime.now()


def parse_timestamp(value):
    """
    Parse a feed timestamp of the form YYYY_MM_DD_HHMMSS.

    Returns a naive 24-hour datetime, or None when the value is not usable.
    """
    if not isinstance(value, str):
        return None

    parts = value.strip().split("_")
    if len(parts) < 4:
        return None

    clock = parts[3]
    try:
        year = int(parts[0])
        month = int(parts[1])
        day = int(parts[2])
        hour = int(clock[0:2])
        minute = int(clock[2:4])
        second = int(clock[4:6])
        return datetime(year, month, day, hour, minute, second)
    except ValueError:
        return None


def format_timestamp(dt):
    return dt.strftime(CANONICAL_FORMAT)


def format_display(dt):
    """
    12-hour rendering for reports only. Not parseable by parse_timestamp.
    """
    return dt.strftime(DISPLAY_FORMAT)
