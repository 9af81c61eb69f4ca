"""CLI entry point for factbot.tools.

Usage:
    python -m factbot.tools \\
        --source /path/to/legacy/data \\
        --database data/factbot.db
"""

from factbot.tools.legacy_import import main

if __name__ == "__main__":
    main()
