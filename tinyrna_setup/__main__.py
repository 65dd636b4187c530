"""Allow tinyrna-setup to be executable through `python -m tinyrna_setup`."""
from tinyrna_setup.cli import cli


if __name__ == "__main__":  # pragma: no cover
    cli()
