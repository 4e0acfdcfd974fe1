"""Module entrypoint for ``python -m codeshow``.

Argument parsing and runtime setup happen in ``codeshow.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
