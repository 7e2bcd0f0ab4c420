from __future__ import annotations

import importlib
import logging
import logging.config
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .commands import EXTENSION_KEY, attendance_cli
from .config import get_settings_module
from .container import Container, build_container
from .database.bootstrap import apply_schema, list_tables, seed_default_settings

logger = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    logging.config.dictConfig(getattr(settings, "LOGGING"))
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    if container is None:
        logger.debug(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )
        container = build_container(db_config=db_config)
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(container.conn)
            seed_default_settings(container.conn)
            logger.info("Schema ready (tables=%d)", len(list_tables(container.conn)))

    app.extensions[EXTENSION_KEY] = container
    app.cli.add_command(attendance_cli)
    return app
