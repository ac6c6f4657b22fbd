"""
SMS text rendering.
"""
from datetime import datetime

import pytz
from django.conf import settings


def render_sms_template(template: str, replacements: dict) -> str:
    """Replace every ``{name}`` token with its value. Unknown tokens are left as-is."""
    result = template
    for key, value in replacements.items():
        result = result.replace('{' + key + '}', str(value))
    return result


def format_relative(instant: datetime, now: datetime, tz=None) -> str:
    """
    Render ``instant`` relative to ``now`` in the clinic timezone.

    "Today 14:30", "Tomorrow 09:00", "Yesterday 08:00", otherwise
    "dd/mm/YYYY HH:MM".
    """
    if tz is None:
        tz = pytz.timezone(settings.CLINIC_TIME_ZONE)
    elif isinstance(tz, str):
        tz = pytz.timezone(tz)

    local = instant.astimezone(tz)
    day_diff = (local.date() - now.astimezone(tz).date()).days
    time_string = local.strftime('%H:%M')

    if day_diff == 0:
        return f'Today {time_string}'
    if day_diff == 1:
        return f'Tomorrow {time_string}'
    if day_diff == -1:
        return f'Yesterday {time_string}'
    return local.strftime('%d/%m/%Y %H:%M')
