"""Main entry point when executing tubeflow as a package.

This allows running the package using python -m tubeflow.
"""

from tubeflow.main import cli_entry_point

if __name__ == "__main__":
    cli_entry_point()
