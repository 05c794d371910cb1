"""Module entrypoint for `python -m ghrest`.

This module enables running ghrest as a Python module using `python -m ghrest`.
It forwards to the same main() function as the console script.

Usage:
    ```bash
    # Run as module (equivalent to 'ghrest' command)
    python -m ghrest request repos/octocat/Hello-World

    # Every page of a collection
    python -m ghrest request repos/octocat/Hello-World/issues --all
    ```
"""
import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
