"""Package entrypoint.

`python -m fence_extract` runs the command-line interface.
"""

from fence_extract.cli import cli


if __name__ == "__main__":
    cli(prog_name="fence-extract")
