"""Allow ``python -m ytclip``."""

from ytclip.cli.main import main

if __name__ == "__main__":  # pragma: no cover
    main()
