"""replaycheck CLI entry point.

This module enables running replaycheck as:
    python -m replaycheck <command>
"""

from replaycheck.cli import main

if __name__ == "__main__":
    main()
