"""Allow ``python -m bundlesync``."""

from bundlesync.main import cli

if __name__ == "__main__":
    cli()
