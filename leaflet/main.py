"""Entry point for the Leaflet documentation generator.

Delegates to the Click command group, which loads configuration and
initializes logging before running a subcommand.
"""

from leaflet.cli.commands import leaflet


def main() -> None:
    """Launch the CLI."""
    leaflet()


if __name__ == "__main__":
    main()
