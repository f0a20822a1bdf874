"""Main entry point for the task tracker."""
import logging
import sys
from cli import cli


def main():
    logging.basicConfig(level=logging.WARNING, stream=sys.stderr,
                        format="%(levelname)s: %(message)s")
    cli(prog_name="task-tracker")

if __name__ == "__main__":
    main()
