import os
from dataclasses import dataclass
from io import BytesIO

from PIL import Image

from .errors import TaxobotError
from .selection import load_candidate_pool
from .taxonomy import parse, require_species, resolve


@dataclass(frozen=True)
class ReencodeResult:
    data: bytes
    filesize: int
    quality: int
    scale: float


def _encode_jpeg(img, quality):
    out = BytesIO()
    img.convert("RGB").save(out, "JPEG", quality=quality)
    return out.getvalue()


# =========================================================
# RE-ENCODING
# =========================================================
def reduce_image_filesize(image_bytes, target_size=900000, quality_step=5, resize_factor=0.95):
    """Shrink a JPEG until it fits under `target_size` bytes.

    Quality drops by `quality_step` each round; when that alone is not enough
    the picture is also scaled by `resize_factor`. Stops once the size fits or
    quality reaches `quality_step`, returning the best effort either way.
    Images already under the target are returned untouched. Bytes Pillow
    cannot read raise `PIL.UnidentifiedImageError` (an OSError).
    """
    if len(image_bytes) <= target_size:
        Image.open(BytesIO(image_bytes)).verify()
        return ReencodeResult(image_bytes, len(image_bytes), 100, 1.0)

    current = Image.open(BytesIO(image_bytes))
    current.load()
    quality = 100
    scale = 1.0
    data = image_bytes

    while len(data) > target_size and quality > quality_step:
        quality = max(quality - quality_step, quality_step)
        data = _encode_jpeg(current, quality)

        if len(data) > target_size:
            w, h = current.size
            current = current.resize(
                (max(1, round(w * resize_factor)), max(1, round(h * resize_factor))),
                Image.LANCZOS,
            )
            scale *= resize_factor
            data = _encode_jpeg(current, quality)

        print(f"  quality={quality} scale={scale:.3f} size={len(data)}")

    return ReencodeResult(data, len(data), quality, scale)


# =========================================================
# RESIZED IMAGE CACHE
# =========================================================
def resized_image_path(resized_dir, genus_name, species_slug):
    return os.path.join(resized_dir, f"{genus_name}_{species_slug}.jpg")


def load_post_image(identifier, genus_name, species_slug, resized_dir, max_filesize):
    """Bytes of the postable image, reusing the resized copy when present."""
    cached = resized_image_path(resized_dir, genus_name, species_slug)
    if os.path.exists(cached):
        with open(cached, "rb") as f:
            return f.read()

    with open(identifier, "rb") as f:
        result = reduce_image_filesize(f.read(), target_size=max_filesize)

    os.makedirs(resized_dir, exist_ok=True)
    with open(cached, "wb") as f:
        f.write(result.data)
    return result.data


def prepare_all(config, table):
    """Write a resized copy of every plate in the pool that lacks one.

    Returns (prepared, skipped, failed) where failed pairs each path with its
    error message.
    """
    prepared, skipped, failed = [], [], []
    os.makedirs(config.resized_dir, exist_ok=True)

    for identifier in sorted(load_candidate_pool(config.pool_source)):
        try:
            key = require_species(parse(identifier), identifier)
            genus_name = resolve(key.genus_code, table)

            target = resized_image_path(config.resized_dir, genus_name, key.species_slug)
            if os.path.exists(target):
                skipped.append(identifier)
                continue

            print(f"Resizing {identifier} -> {target}")
            with open(identifier, "rb") as f:
                result = reduce_image_filesize(f.read(), target_size=config.max_filesize)
            with open(target, "wb") as f:
                f.write(result.data)
        except (TaxobotError, OSError) as e:
            print(f"Skipping {identifier}: {e}")
            failed.append((identifier, str(e)))
            continue

        prepared.append(identifier)

    return prepared, skipped, failed
