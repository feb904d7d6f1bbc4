import time
from dataclasses import dataclass, field

from .captions import compose_captions
from .errors import TaxobotError
from .images import load_post_image
from .ledger import ExclusionLedger
from .selection import EXHAUSTED, load_candidate_pool, select
from .taxonomy import parse, require_species, resolve

POSTED = "posted"
EXHAUSTED_STATUS = "exhausted"
FAILED = "failed"
DRY_RUN = "dry_run"


@dataclass
class RunResult:
    status: str
    stage: str = None
    identifier: str = None
    taxon: str = None
    error: Exception = None
    posts: list = field(default_factory=list)

    @property
    def ok(self):
        return self.status in (POSTED, DRY_RUN)


class _StageFailed(Exception):
    def __init__(self, stage, error):
        super().__init__(stage)
        self.stage = stage
        self.error = error


def _stage(name, fn, *args, **kwargs):
    try:
        return fn(*args, **kwargs)
    except (TaxobotError, OSError) as e:
        raise _StageFailed(name, e) from e


# =========================================================
# RUN (STRICT ORDER: NOTHING IS RECORDED UNTIL EVERY POST SUCCEEDED)
# =========================================================
def run(config, table, enricher, publisher=None, rng=None, sleep=time.sleep):
    """Select, resolve, enrich and publish one plate.

    The ledger is appended only after every caption was published. With
    `config.dry_run` (or no publisher) nothing is posted or recorded.
    """
    ledger = ExclusionLedger(config.ledger_path)
    result = RunResult(status=FAILED)

    try:
        pool = _stage("select", load_candidate_pool, config.pool_source)
        excluded = _stage("select", ledger.recent, config.recent_window)
        selected = select(pool, excluded, rng=rng)
        if selected is EXHAUSTED:
            print("No eligible files to select from.")
            return RunResult(status=EXHAUSTED_STATUS)

        result.identifier = selected
        print(f"Selected file: {selected}")

        key = _stage("parse", parse, selected)
        _stage("parse", require_species, key, selected)
        genus_name = _stage("resolve", resolve, key.genus_code, table)
        result.taxon = f"{genus_name} {key.species_slug}"

        match = _stage("enrich", enricher.match_species, genus_name, key.species_slug)
        result.taxon = match.scientific_name
        print(f"GBIF: {match.scientific_name} {match.url}")

        image = _stage(
            "image", load_post_image,
            selected, genus_name, key.species_slug, config.resized_dir, config.max_filesize,
        )
        captions = compose_captions(match, config.credit_handle)

        if config.dry_run or publisher is None:
            for caption in captions:
                print(f"[DRY RUN] {caption.lang}: {caption.text!r} (alt: {caption.alt_text!r})")
            result.status = DRY_RUN
            return result

        # Phase 1: every language variant must go out.
        for i, caption in enumerate(captions):
            if i:
                sleep(config.post_delay)
            ref = _stage("publish", publisher.post, caption.text, image, caption.alt_text, lang=caption.lang)
            result.posts.append(ref)
            print(f"Posted ({caption.lang}): {ref.uri}")

        # Phase 2: commit.
        _stage("commit", ledger.append, selected)

    except _StageFailed as failure:
        result.stage = failure.stage
        result.error = failure.error
        print(f"Run failed at {failure.stage}: {failure.error}")
        return result

    result.status = POSTED
    return result
