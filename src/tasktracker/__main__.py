# src/tasktracker/__main__.py

from tasktracker.cli.main import run

run()
