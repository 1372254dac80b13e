"""Allow running as python -m webfilter."""

from .cli import main

if __name__ == "__main__":
    main()
