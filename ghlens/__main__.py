"""Main entry point when executing ghlens as a package.

This allows running the package using python -m ghlens.
"""

from ghlens.main import cli_entry_point

if __name__ == "__main__":
    cli_entry_point()
