"""Text helpers for displaying recorded sleep nights."""

from datetime import datetime

ONE_MINUTE_MILLIS = 60 * 1000
ONE_HOUR_MILLIS = 60 * ONE_MINUTE_MILLIS

_QUALITY_STRINGS = {
    0: 'Very bad',
    1: 'Poor',
    2: 'So-so',
    3: 'OK',
    4: 'Pretty good',
    5: 'Excellent!',
}


def convert_numeric_quality_to_string(quality):
    return _QUALITY_STRINGS.get(quality, '--')


def _weekday(milli):
    return datetime.fromtimestamp(milli / 1000).strftime('%A')


def _datetime_string(milli):
    return datetime.fromtimestamp(milli / 1000).strftime('%a %b %d %Y %H:%M')


def convert_duration_to_formatted(start_time_milli, end_time_milli):
    """Short description of how long a night lasted, e.g. '7 hours on Monday'."""
    duration = end_time_milli - start_time_milli
    weekday = _weekday(start_time_milli)
    if duration < ONE_MINUTE_MILLIS:
        return f"{duration // 1000} seconds on {weekday}"
    if duration < ONE_HOUR_MILLIS:
        return f"{duration // ONE_MINUTE_MILLIS} minutes on {weekday}"
    return f"{duration // ONE_HOUR_MILLIS} hours on {weekday}"


def format_nights(nights):
    """Plain-text summary of nights, most recent first as given."""
    lines = ['Here is your sleep data']
    for night in nights:
        start = night['start_time_milli']
        end = night['end_time_milli']
        lines.append('')
        lines.append(f"Start: {_datetime_string(start)}")
        if end != start:
            lines.append(f"End: {_datetime_string(end)}")
            lines.append(f"Quality: {convert_numeric_quality_to_string(night['sleep_quality'])}")
            seconds = (end - start) // 1000
            hours, rest = divmod(seconds, 3600)
            minutes, secs = divmod(rest, 60)
            lines.append(f"Hours:Minutes:Seconds {hours}:{minutes}:{secs}")
    return '\n'.join(lines)
