"""Import legacy infobot factoid files into factbot.

Classic infobot keeps its knowledge in ``<botname>-is.txt`` and
``<botname>-are.txt``, one ``key => value`` pair per line. Values may use
``<reply>``/``<action>`` tags and ``a|b|c`` alternatives. Each alternative
becomes its own factoid here, since factbot already picks uniformly among
the factoids sharing a key.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import re
from dataclasses import dataclass
from pathlib import Path

from factbot.db.connection import DatabaseConnection
from factbot.db.schema import initialize_schema
from factbot.kb.factoid import Factoid, Provenance
from factbot.kb.store import FactoidStore, StoreError
from factbot.nlu.keys import normalize_key

logger = logging.getLogger(__name__)
LOGGER_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_LEGACY_IMPORT_HANDLER_TAG = "_legacy_import_handler"
IMPORT_NICK = "legacy-import"


@dataclass
class ImportStats:
    """Statistics from an import operation."""

    total_lines: int = 0
    parsed: int = 0
    skipped_invalid: int = 0
    imported: int = 0
    duplicates: int = 0
    errors: int = 0


def clean_irc_formatting(text: str) -> str:
    """Convert IRC formatting codes to Markdown and remove control characters.

    Args:
        text: Text with IRC formatting codes.

    Returns:
        Cleaned text with Markdown formatting.
    """
    text = re.sub(r"\x02([^\x02]*?)\x02", r"**\1**", text)
    text = re.sub(r"\x1D([^\x1D]*?)\x1D", r"*\1*", text)
    text = re.sub(r"\x1F([^\x1F]*?)\x1F", r"__\1__", text)
    text = re.sub(r"\x03\d{1,2}(?:,\d{1,2})?", "", text)
    # Orphaned control codes left over from the conversions above
    text = re.sub(r"[\x00-\x08\x0B-\x0C\x0E-\x1F\x7F]", "", text)

    return text.strip()


def parse_factoid_line(line: str) -> tuple[str, str] | None:
    """Parse a single factoid line in 'topic => information' format.

    Args:
        line: Line from factoid file.

    Returns:
        Tuple of (key, value) if valid, None otherwise.
    """
    if "=>" not in line:
        return None

    key, value = line.split("=>", 1)
    key = key.strip(" \t\r\n")
    value = value.strip(" \t\r\n")

    if not key or not value:
        return None

    return (key, value)


def build_factoids(key: str, value: str, verb: str) -> list[Factoid]:
    """Turn one legacy entry into factbot factoids.

    Tagged alternatives keep their tag; untagged ones are stored as
    "<key> <verb> <value>" so the recall reads as a sentence, matching what
    ``key :is value`` produces.

    Args:
        key: Legacy topic, as written in the file.
        value: Legacy value, possibly with ``|`` alternatives.
        verb: "is" or "are", from the file the entry came from.

    Returns:
        One factoid per non-empty alternative. Empty if the key normalizes
        to nothing.
    """
    normalized = normalize_key(key)
    if not normalized:
        return []

    provenance = Provenance(nick=IMPORT_NICK, ident=IMPORT_NICK)
    factoids = []
    for alternative in value.split("|"):
        alternative = alternative.strip()
        if not alternative:
            continue
        if not alternative.startswith("<"):
            alternative = f"{key.strip()} {verb} {alternative}"
        try:
            factoids.append(Factoid.new(normalized, alternative, provenance))
        except ValueError:
            logger.debug(f"Skipping empty alternative for '{normalized}'")
    return factoids


async def _is_duplicate(store: FactoidStore, factoid: Factoid) -> bool:
    async for existing in store.find_by_key(factoid.key):
        if existing.value == factoid.value and existing.kind == factoid.kind:
            return True
    return False


async def import_factoid_file(
    file_path: Path,
    verb: str,
    store: FactoidStore,
    stats: ImportStats | None = None,
) -> ImportStats:
    """Import a legacy factoid file into the database.

    Args:
        file_path: Path to the factoid file.
        verb: "is" or "are".
        store: FactoidStore instance for database operations.
        stats: Optional stats accumulator.

    Returns:
        ImportStats with import statistics.
    """
    if stats is None:
        stats = ImportStats()
    logger.info(f"Importing '{verb}' factoids from {file_path}")

    if not file_path.exists():
        logger.error(f"File not found: {file_path}")
        return stats

    with open(file_path, encoding="utf-8", errors="replace") as f:
        for line_num, line in enumerate(f, 1):
            stats.total_lines += 1
            # Keep control chars for now, clean_irc_formatting needs them
            line = line.strip(" \t\r\n")
            if not line:
                continue

            result = parse_factoid_line(line)
            if result is None:
                stats.skipped_invalid += 1
                logger.debug(f"Invalid line format at {file_path}:{line_num}")
                continue

            key, value = result
            stats.parsed += 1

            factoids = build_factoids(
                clean_irc_formatting(key), clean_irc_formatting(value), verb
            )
            if not factoids:
                stats.skipped_invalid += 1
                continue

            for factoid in factoids:
                try:
                    if await _is_duplicate(store, factoid):
                        stats.duplicates += 1
                        logger.debug(f"Duplicate factoid: {factoid.key}")
                        continue
                    await store.insert(factoid)
                    stats.imported += 1
                except StoreError as e:
                    stats.errors += 1
                    logger.warning(
                        f"Error storing factoid at {file_path}:{line_num}: {e}"
                    )

                if stats.imported and stats.imported % 1000 == 0:
                    logger.info(f"Imported {stats.imported} factoids so far...")

    return stats


async def import_legacy_data(
    source_dir: Path,
    db_path: Path,
    botname: str | None = None,
) -> ImportStats:
    """Import all legacy factoid files from a directory.

    Args:
        source_dir: Directory containing legacy factoid files.
        db_path: Path to SQLite database file.
        botname: Bot name to look for (e.g., 'infobot'). If None, auto-detect.

    Returns:
        Combined ImportStats for all files.

    Raises:
        FileNotFoundError: If no factoid files are found.
    """
    logger.info(f"Starting legacy import from {source_dir}")
    logger.info(f"Database: {db_path}")

    files: list[tuple[Path, str]] = []
    for verb in ("is", "are"):
        if botname:
            candidates = [source_dir / f"{botname}-{verb}.txt"]
        else:
            candidates = sorted(source_dir.glob(f"*-{verb}.txt"))[:1]
        files.extend(
            (candidate, verb) for candidate in candidates if candidate.exists()
        )

    if not files:
        raise FileNotFoundError(f"No factoid files found in {source_dir}")

    conn = DatabaseConnection(db_path)
    await conn.connect()
    await initialize_schema(conn)
    store = FactoidStore(conn)

    total_stats = ImportStats()
    try:
        for file_path, verb in files:
            await import_factoid_file(file_path, verb, store, stats=total_stats)
        logger.info(f"Knowledge base now holds {await store.count()} factoids")
    finally:
        await conn.close()

    return total_stats


def render_import_summary(stats: ImportStats) -> list[str]:
    """Render the end-of-run summary lines."""
    return [
        "Import summary",
        f"  Lines read:       {stats.total_lines}",
        f"  Entries parsed:   {stats.parsed}",
        f"  Invalid entries:  {stats.skipped_invalid}",
        f"  Factoids stored:  {stats.imported}",
        f"  Duplicates:       {stats.duplicates}",
        f"  Errors:           {stats.errors}",
    ]


def configure_import_logging(verbose: bool) -> logging.Logger:
    """Configure module-scoped logging for the import CLI.

    Leaves the root logger alone so dependency debug logs (e.g. aiosqlite)
    do not flood verbose output.

    Args:
        verbose: Whether debug-level logging should be enabled.

    Returns:
        Configured module logger.
    """
    log_level = logging.DEBUG if verbose else logging.INFO
    logger.setLevel(log_level)
    logger.propagate = False

    for handler in list(logger.handlers):
        if getattr(handler, _LEGACY_IMPORT_HANDLER_TAG, False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setLevel(log_level)
    handler.setFormatter(logging.Formatter(LOGGER_FORMAT))
    setattr(handler, _LEGACY_IMPORT_HANDLER_TAG, True)
    logger.addHandler(handler)
    return logger


def main() -> None:
    """CLI entry point for legacy import tool."""
    parser = argparse.ArgumentParser(
        description="Import legacy infobot factoid files into factbot"
    )
    parser.add_argument(
        "--source",
        type=Path,
        required=True,
        help="Directory containing legacy factoid files",
    )
    parser.add_argument(
        "--database",
        type=Path,
        default=Path("data/factbot.db"),
        help="Path to SQLite database (default: data/factbot.db)",
    )
    parser.add_argument(
        "--botname",
        type=str,
        help="Bot name to look for (e.g., 'infobot'). If not specified, auto-detect.",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args()
    configure_import_logging(verbose=args.verbose)

    try:
        stats = asyncio.run(
            import_legacy_data(
                source_dir=args.source,
                db_path=args.database,
                botname=args.botname,
            )
        )
    except FileNotFoundError as e:
        parser.error(str(e))

    print()
    for line in render_import_summary(stats):
        print(line)

    if stats.imported > 0:
        print(f"\n✓ Import complete! {stats.imported} factoids imported.")
    else:
        print("\n✗ No factoids were imported.")


if __name__ == "__main__":
    main()
