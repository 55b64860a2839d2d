"""Entry point for `python -m themecord`."""

import sys


def main():
    from themecord.app import run_app
    sys.exit(run_app())


if __name__ == "__main__":
    main()
