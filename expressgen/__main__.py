"""Allows ``python -m expressgen``."""

from expressgen.cli import main

if __name__ == "__main__":
    main()
