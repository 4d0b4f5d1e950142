"""Entry point for ``python -m netspawn``."""

from netspawn.cli.main import main


if __name__ == "__main__":
    main()
