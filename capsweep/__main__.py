"""Main entry point when executing capsweep as a package.

This allows running the package using python -m capsweep.
"""

from capsweep.main import cli_entry_point

if __name__ == "__main__":
    cli_entry_point()
