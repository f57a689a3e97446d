"""
Configuration validation for the ride share API
Checks database, push gateway and timezone settings at startup
"""
import os
import logging
from typing import Dict, List, Tuple, Any
import pytz

logger = logging.getLogger(__name__)

class ConfigValidationError(Exception):
    """Raised when critical configuration is missing or invalid"""
    pass

def validate_database_config() -> Tuple[bool, List[str]]:
    """
    Validate MySQL connection settings.

    DATABASE_URL, when set, takes precedence over the DB_* variables.
    Without either the app falls back to a local SQLite file.

    Returns:
        tuple: (is_valid: bool, issues: List[str])
    """
    issues = []

    if os.getenv('DATABASE_URL'):
        return True, issues

    required_vars = {
        'DB_HOST': 'Database host',
        'DB_USER': 'Database user',
        'DB_NAME': 'Database name',
    }

    for var_name, description in required_vars.items():
        value = os.getenv(var_name)
        if not value or len(value.strip()) == 0:
            issues.append(f"Missing {description} ({var_name})")

    if os.getenv('DB_HOST') and not os.getenv('DB_PASSWORD'):
        issues.append("DB_PASSWORD is empty")

    port = os.getenv('DB_PORT')
    if port and not port.isdigit():
        issues.append(f"DB_PORT must be numeric, got {port!r}")

    return len(issues) == 0, issues

def validate_push_config() -> Tuple[bool, List[str]]:
    issues = []

    enabled = os.getenv('PUSH_NOTIFICATIONS_ENABLED', 'true').lower()
    if enabled not in ('true', 'false'):
        issues.append("PUSH_NOTIFICATIONS_ENABLED must be 'true' or 'false'")

    push_url = os.getenv('EXPO_PUSH_URL', '')
    if push_url and not push_url.startswith('https://'):
        issues.append("EXPO_PUSH_URL should use https")

    return len(issues) == 0, issues

def validate_app_config() -> Tuple[bool, List[str]]:
    issues = []

    timezone_name = os.getenv('APP_TIMEZONE', 'Asia/Kolkata')
    if timezone_name not in pytz.all_timezones_set:
        issues.append(f"Unknown APP_TIMEZONE {timezone_name!r}")

    port = os.getenv('PORT', '3000')
    if not port.isdigit():
        issues.append(f"PORT must be numeric, got {port!r}")

    return len(issues) == 0, issues

def check_production_readiness() -> Dict[str, Any]:
    """
    Comprehensive check of production readiness.

    Returns:
        dict: Status information including issues
    """
    database_valid, database_issues = validate_database_config()
    push_valid, push_issues = validate_push_config()
    app_valid, app_issues = validate_app_config()

    all_issues = database_issues + push_issues + app_issues

    result = {
        'production_ready': len(all_issues) == 0,
        'database_configured': database_valid,
        'push_configured': push_valid,
        'issues': all_issues,
    }

    if result['production_ready']:
        logger.info("CONFIG: Production readiness check PASSED")
    else:
        logger.warning(f"CONFIG: Production readiness check FAILED - Issues: {len(all_issues)}")
        for issue in all_issues:
            logger.warning(f"CONFIG: Issue - {issue}")

    return result

def require_valid_config():
    """Raise ConfigValidationError if the app settings are unusable"""
    app_valid, app_issues = validate_app_config()
    if not app_valid:
        raise ConfigValidationError('; '.join(app_issues))

def get_config_status() -> str:
    """
    Get a human-readable status of the configuration.
    """
    status = check_production_readiness()

    if status['production_ready']:
        return "Configuration is production-ready"
    elif not status['database_configured']:
        return "MySQL not configured, using DATABASE_URL fallback or local SQLite"
    else:
        return f"Configuration has {len(status['issues'])} issues"
