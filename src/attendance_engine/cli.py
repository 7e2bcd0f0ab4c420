from __future__ import annotations

from flask.cli import FlaskGroup

from .main import create_app

cli = FlaskGroup(create_app=create_app, help="Attendance time-engine command line.")


if __name__ == "__main__":
    cli()
