def build_logging(level: str) -> dict:
    """dictConfig mapping shared by every environment."""
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "verbose": {
                "format": "%(levelname)s %(asctime)s %(name)s %(message)s",
            },
        },
        "handlers": {
            "console": {
                "level": "DEBUG",
                "class": "logging.StreamHandler",
                "formatter": "verbose",
            },
        },
        "loggers": {
            "attendance_engine": {"level": level},
            "mysql.connector": {"level": "WARNING"},
        },
        "root": {"level": "WARNING", "handlers": ["console"]},
    }
