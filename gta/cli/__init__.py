"""CLI Package"""

from gta.cli.main import main, run

__all__ = ["main", "run"]
