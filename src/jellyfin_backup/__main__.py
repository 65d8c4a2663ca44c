"""Allow running the package with ``python -m jellyfin_backup``."""

from .app import main

if __name__ == "__main__":
    main()
