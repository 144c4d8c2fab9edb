"""Allow ``python -m jvmboot``."""

from jvmboot.cli import main

if __name__ == "__main__":
    main()
