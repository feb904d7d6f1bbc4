import pytest

from taxobot.ledger import ExclusionLedger


@pytest.fixture
def ledger(tmp_path):
    return ExclusionLedger(str(tmp_path / "past_posts.txt"))


def test_missing_file_is_empty_ledger(ledger):
    assert ledger.recent(50) == set()
    assert ledger.tail(5) == []


def test_recent_returns_last_n(ledger):
    for entry in ["A", "B", "C"]:
        ledger.append(entry)
    assert ledger.recent(2) == {"B", "C"}
    assert ledger.recent(10) == {"A", "B", "C"}
    assert ledger.recent(0) == set()


def test_recent_rejects_negative_window(ledger):
    with pytest.raises(ValueError):
        ledger.recent(-1)


def test_recent_is_idempotent(ledger):
    ledger.append("Planches/An_gambiae.jpg")
    ledger.append("Planches/Ae_aegypti.jpg")
    assert ledger.recent(1) == ledger.recent(1)
    assert ledger.tail(2) == ledger.tail(2)


def test_append_keeps_prior_order(ledger):
    for entry in ["A", "B", "C"]:
        ledger.append(entry)
    before = ledger.entries()
    ledger.append("D")
    assert ledger.entries() == before + ["D"]
    assert ledger.tail(1) == ["D"]
    assert "D" in ledger.recent(1)


def test_append_writes_one_line_per_entry(ledger):
    ledger.append("Planches/An_gambiae.jpg")
    ledger.append("Planches/Culex pipiens/Cx_pipiens.jpg")
    with open(ledger.path, encoding="utf-8") as f:
        assert f.read() == "Planches/An_gambiae.jpg\nPlanches/Culex pipiens/Cx_pipiens.jpg\n"


@pytest.mark.parametrize("identifier", ["", "   ", "two\nlines", "carriage\rreturn", "nul\x00byte"])
def test_append_rejects_entries_the_reader_would_skip(ledger, identifier):
    with pytest.raises(ValueError):
        ledger.append(identifier)


def test_malformed_lines_are_skipped(ledger):
    with open(ledger.path, "wb") as f:
        f.write(b"A\n\n   \nbad\x00line\n\xff\xfe\nB\nC\n")
    assert ledger.entries() == ["A", "B", "C"]
    assert ledger.recent(2) == {"B", "C"}


def test_append_after_torn_write(ledger):
    with open(ledger.path, "w", encoding="utf-8") as f:
        f.write("A\nPlanches/An_gam")
    ledger.append("B")
    assert ledger.entries() == ["A", "Planches/An_gam", "B"]
    assert ledger.tail(1) == ["B"]


def test_windows_line_endings(ledger):
    with open(ledger.path, "wb") as f:
        f.write(b"A\r\nB\r\n")
    assert ledger.tail(2) == ["A", "B"]


@pytest.mark.parametrize(
    "identifier",
    [
        "Planches/An_gambiae\xa0s.l.jpg",
        "Planches/Ae_aegypti\u202fFrance.jpg",
        "Planches/Cx_pipiens\u200dmolestus.jpg",
        "Planches/Ae_albopictus\tfemale.jpg",
        " Planches/Cs_annulata.jpg ",
    ],
)
def test_appended_entry_is_recent(ledger, identifier):
    ledger.append("Planches/An_funestus.jpg")
    ledger.append(identifier)
    assert ledger.tail(1) == [identifier]
    assert identifier in ledger.recent(1)
