from datetime import datetime
import pytz
from flask import current_app, has_app_context

DEFAULT_TIMEZONE = 'Asia/Kolkata'


def get_app_timezone():
    """Timezone used for ride schedules, from APP_TIMEZONE"""
    name = DEFAULT_TIMEZONE
    if has_app_context():
        name = current_app.config.get('APP_TIMEZONE', DEFAULT_TIMEZONE)
    return pytz.timezone(name)


def get_local_time_naive():
    """Get current local time as naive datetime for database storage"""
    return datetime.now(get_app_timezone()).replace(tzinfo=None)


def get_local_today():
    return get_local_time_naive().date()
