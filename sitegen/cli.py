"""Console entry point for the sitegen CLI."""

from sitegen.interface.cli.cli import cli

if __name__ == "__main__":
    cli()
