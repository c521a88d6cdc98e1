import os

_ALIASES = {
    "prod": "production",
    "production": "production",
    "test": "testing",
    "testing": "testing",
    "dev": "development",
    "development": "development",
}


def get_settings_module() -> str:
    """Dotted path of the settings module to load.

    ``SETTINGS_MODULE`` wins when set; otherwise ``APP_ENV`` picks one of the
    bundled modules and anything unrecognised falls back to development.
    """
    explicit = os.getenv("SETTINGS_MODULE")
    if explicit:
        return explicit

    env = os.getenv("APP_ENV", "development").strip().lower()
    return f"config.{_ALIASES.get(env, 'development')}"
