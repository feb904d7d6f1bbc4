import os
import random

from .errors import PoolSourceError

IMAGE_EXTS = (".jpg", ".jpeg")

_rng = random.Random()


class _Exhausted:
    """No eligible candidate is left once recent posts are excluded."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "EXHAUSTED"

    def __bool__(self):
        return False


EXHAUSTED = _Exhausted()


def load_candidate_pool(source):
    """Read the candidate pool from a list file or an image folder.

    A file lists one image path per line (blank lines ignored). A folder is
    walked recursively for .jpg/.jpeg files.
    """
    if os.path.isdir(source):
        found = []
        for root, _, files in os.walk(source):
            for name in files:
                if name.lower().endswith(IMAGE_EXTS):
                    found.append(os.path.join(root, name))
        return frozenset(found)

    try:
        with open(source, encoding="utf-8") as f:
            return frozenset(line.strip() for line in f if line.strip())
    except UnicodeDecodeError as e:
        raise PoolSourceError(f"{source}: not valid UTF-8 ({e})") from e


def select(pool, excluded, rng=None):
    """Pick one identifier from `pool - excluded` uniformly at random.

    Returns EXHAUSTED when nothing is eligible. Neither argument is mutated.
    """
    eligible = sorted(set(pool) - set(excluded))
    if not eligible:
        return EXHAUSTED
    rng = rng or _rng
    return eligible[rng.randrange(len(eligible))]
