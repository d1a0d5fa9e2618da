"""Allow ``python -m versescope``."""

from versescope.cli import main

if __name__ == "__main__":
    main()
