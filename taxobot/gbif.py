from dataclasses import dataclass

import requests

from .errors import EnrichmentError

GBIF_SPECIES_URL = "https://www.gbif.org/species/{}"


@dataclass(frozen=True)
class TaxonMatch:
    scientific_name: str
    usage_key: int
    url: str


class GbifClient:
    """Minimal client for the GBIF backbone name matcher."""

    def __init__(self, api_url="https://api.gbif.org/v1", session=None, timeout=30):
        self.api_url = api_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def match_species(self, genus_name, species_slug):
        name = f"{genus_name} {species_slug}".strip()
        try:
            r = self.session.get(
                f"{self.api_url}/species/match",
                params={"name": name},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise EnrichmentError(f"GBIF request failed for {name!r}: {e}") from e

        if r.status_code != 200:
            raise EnrichmentError(f"GBIF Error {r.status_code} for {name!r}: {r.text}")

        try:
            data = r.json()
        except ValueError as e:
            raise EnrichmentError(f"GBIF returned invalid JSON for {name!r}: {e}") from e
        if not isinstance(data, dict):
            raise EnrichmentError(f"Unexpected GBIF response for {name!r}: {data!r}")

        usage_key = data.get("usageKey")
        if data.get("matchType") == "NONE" or usage_key is None:
            raise EnrichmentError(f"No GBIF match for {name!r}")

        return TaxonMatch(
            scientific_name=data.get("scientificName") or name,
            usage_key=usage_key,
            url=GBIF_SPECIES_URL.format(usage_key),
        )
