from io import BytesIO
from unittest.mock import MagicMock

import pytest
from PIL import Image

from taxobot.bluesky import PostRef
from taxobot.config import BotConfig
from taxobot.gbif import TaxonMatch


def make_jpeg(size=(64, 48), color=(120, 80, 40)):
    out = BytesIO()
    Image.new("RGB", size, color=color).save(out, "JPEG", quality=95)
    return out.getvalue()


@pytest.fixture
def lookup_csv(tmp_path):
    path = tmp_path / "genus_lookup_table.csv"
    path.write_text("genus_abbreviation,genus_name\nAn,Anopheles\nAe,Aedes\n", encoding="utf-8")
    return str(path)


@pytest.fixture
def plates(tmp_path):
    """Plate library with two valid plates, listed in jpg_files.txt."""
    folder = tmp_path / "Planches"
    folder.mkdir()
    paths = []
    for name in ("An_gambiae.jpg", "Ae_aegypti.jpg"):
        p = folder / name
        p.write_bytes(make_jpeg())
        paths.append(str(p))
    listing = tmp_path / "jpg_files.txt"
    listing.write_text("\n".join(paths) + "\n", encoding="utf-8")
    return paths


@pytest.fixture
def config(tmp_path, lookup_csv, plates):
    return BotConfig(
        pool_source=str(tmp_path / "jpg_files.txt"),
        ledger_path=str(tmp_path / "past_posts.txt"),
        lookup_table_path=lookup_csv,
        resized_dir=str(tmp_path / "Resized"),
        post_delay=0,
        bluesky_handle="taxobot.bsky.social",
        bluesky_password="app-password",
        post_log_path=str(tmp_path / "post_log.csv"),
        error_log_path=str(tmp_path / "error_log.txt"),
    )


@pytest.fixture
def enricher():
    mock = MagicMock()
    mock.match_species.side_effect = lambda genus, species: TaxonMatch(
        scientific_name=f"{genus} {species} Author, 1900",
        usage_key=1651430,
        url="https://www.gbif.org/species/1651430",
    )
    return mock


@pytest.fixture
def publisher():
    mock = MagicMock()
    mock.post.side_effect = lambda text, image, alt, lang=None: PostRef(
        uri=f"at://did:plc:bot/app.bsky.feed.post/{lang}", cid="bafy"
    )
    return mock
