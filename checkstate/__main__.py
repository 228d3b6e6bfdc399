"""Allows `python -m checkstate`."""

from checkstate.main import run

if __name__ == "__main__":
    run()
