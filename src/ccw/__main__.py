"""Allow ``python -m ccw``."""

from ccw.cli import app

if __name__ == "__main__":
    app()
