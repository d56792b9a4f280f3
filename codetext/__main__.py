"""Module entrypoint for ``python -m codetext``."""

from .cli import main


if __name__ == "__main__":
    main()
