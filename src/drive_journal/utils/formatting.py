def minutes_to_hours_and_minutes(minutes: int) -> tuple:
    """Split a duration in minutes into whole hours and remaining minutes."""
    return divmod(int(minutes), 60)


def format_duration(minutes: int) -> str:
    """Format a duration in minutes as ``h:mm``."""
    if minutes < 0:
        return "-" + format_duration(-minutes)
    hours, rest = minutes_to_hours_and_minutes(minutes)
    return f"{hours}:{rest:02d}"


def format_distance(distance: float, decimals: int = 1) -> str:
    return f"{distance:.{decimals}f}"
