import os
import unicodedata


def is_valid_entry(line):
    """Not blank, and no control characters other than tab."""
    if not line.strip():
        return False
    return all(ch == "\t" or unicodedata.category(ch) != "Cc" for ch in line)


class ExclusionLedger:
    """Append-only history of posted image identifiers, one per line.

    Only the most recent entries are consulted when excluding candidates.
    A missing file is an empty ledger. Lines that are blank, undecodable or
    hold control characters are skipped rather than failing the run.
    """

    def __init__(self, path):
        self.path = path

    def entries(self):
        if not os.path.exists(self.path):
            return []

        entries = []
        with open(self.path, "rb") as f:
            for raw in f:
                try:
                    line = raw.decode("utf-8").rstrip("\r\n")
                except UnicodeDecodeError:
                    continue
                if is_valid_entry(line):
                    entries.append(line)
        return entries

    def tail(self, n):
        """Last `n` entries, oldest first."""
        if n < 0:
            raise ValueError(f"n must be non-negative, got {n}")
        if n == 0:
            return []
        return self.entries()[-n:]

    def recent(self, n):
        return set(self.tail(n))

    def append(self, identifier):
        # Anything the reader would skip is refused here.
        if not identifier or not is_valid_entry(identifier):
            raise ValueError(f"Not a valid ledger entry: {identifier!r}")

        # A torn previous write leaves no trailing newline; start a fresh line.
        prefix = ""
        if os.path.exists(self.path) and os.path.getsize(self.path) > 0:
            with open(self.path, "rb") as f:
                f.seek(-1, os.SEEK_END)
                if f.read(1) != b"\n":
                    prefix = "\n"

        with open(self.path, "a", encoding="utf-8", newline="\n") as f:
            f.write(f"{prefix}{identifier}\n")
            f.flush()
            os.fsync(f.fileno())
