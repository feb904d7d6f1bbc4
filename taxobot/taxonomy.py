import csv
import os
from dataclasses import dataclass
from types import MappingProxyType

from .errors import LookupTableError, MalformedIdentifierError, UnknownGenusError


@dataclass(frozen=True)
class TaxonKey:
    genus_code: str
    species_slug: str


# =========================================================
# FILENAME PARSER
# =========================================================
def parse(identifier):
    """Extract the genus code and species slug from an image path.

    "Planches/An_gambiae.jpg" -> TaxonKey("An", "gambiae")

    The genus code is the first two characters of the base name. The species
    slug is everything after the first underscore, or "" when the name has
    no underscore.
    """
    file_name = os.path.basename(identifier.replace("\\", "/"))
    file_base, _ = os.path.splitext(file_name)

    if len(file_base) < 2:
        raise MalformedIdentifierError(f"Base name too short for a genus code: {identifier!r}")

    _, sep, species_slug = file_base.partition("_")
    return TaxonKey(genus_code=file_base[:2], species_slug=species_slug if sep else "")


def require_species(key, identifier):
    """Reject keys without a species; GBIF would match the genus alone."""
    if not key.species_slug:
        raise MalformedIdentifierError(f"No species after the genus code in {identifier!r}")
    return key


# =========================================================
# GENUS LOOKUP TABLE
# =========================================================
def load_lookup_table(path):
    """Read the `genus_abbreviation,genus_name` CSV into a read-only mapping."""
    table = {}
    with open(path, newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        missing = {"genus_abbreviation", "genus_name"} - set(reader.fieldnames or [])
        if missing:
            raise LookupTableError(f"{path}: missing column(s) {sorted(missing)}")
        for row in reader:
            code = (row["genus_abbreviation"] or "").strip()
            name = (row["genus_name"] or "").strip()
            if not code and not name:
                continue
            if not code or not name:
                raise LookupTableError(f"{path}: incomplete row {row!r}")
            if code in table:
                raise LookupTableError(f"{path}: duplicate genus abbreviation {code!r}")
            table[code] = name
    return MappingProxyType(table)


# =========================================================
# TAXON RESOLVER
# =========================================================
def resolve(genus_code, table):
    if genus_code not in table:
        raise UnknownGenusError(genus_code)
    return table[genus_code]
