"""Package entry point for ``python -m logstitch``."""

from logstitch.cli import main

if __name__ == "__main__":
    main()
