"""Allow ``python -m jetmigrate.cli``."""

from jetmigrate.cli.app import run

if __name__ == "__main__":
    run()
