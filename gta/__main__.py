"""Allow `python -m gta`."""

from gta.cli.main import run

run()
