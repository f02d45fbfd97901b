"""Image storage helpers: S3-backed CDN uploads and local WebP variants."""
from __future__ import annotations

import io
import os
import re
from pathlib import Path
from urllib.parse import urlparse

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from flask import current_app
from PIL import Image, ImageOps, UnidentifiedImageError

from .errors import ValidationError

UPLOAD_TYPES = ("service", "category", "profile")
IMAGE_EXTENSIONS = {"jpeg", "jpg", "png", "gif", "webp"}
IMAGE_MIME_RE = re.compile(r"jpeg|jpg|png|gif|webp")

MAX_IMAGE_BYTES = 5 * 1024 * 1024
MAX_IMAGES_PER_REQUEST = 5

# (label, file suffix, size, quality); size None keeps the source dimensions.
LOCAL_VARIANTS = (
    ("original", "original", None, 85),
    ("large", "large", (800, 600), 80),
    ("medium", "medium", (400, 300), 75),
    ("thumbnail", "thumb", (150, 150), 70),
)
LOCAL_SUFFIXES = tuple(suffix for _, suffix, _, _ in LOCAL_VARIANTS)

CDN_VARIANTS = (
    ("thumbnail", (150, 150)),
    ("medium", (400, 300)),
    ("large", (800, 600)),
)

_VARIANT_SUFFIX_RE = re.compile(r"^(?P<public_id>.+?)(?:-(?:thumbnail|medium|large))?\.[A-Za-z0-9]+$")


def file_size(storage) -> int:
    stream = storage.stream
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(0)
    return size


def extension_of(filename: str | None) -> str:
    return Path(filename or "").suffix.lower().lstrip(".")


def _normalise(image: Image.Image) -> Image.Image:
    image = ImageOps.exif_transpose(image)
    if image.mode in ("RGB", "RGBA"):
        return image
    has_alpha = image.mode in ("P", "LA", "PA") or "A" in image.getbands()
    return image.convert("RGBA" if has_alpha else "RGB")


def open_image(source) -> Image.Image:
    try:
        image = Image.open(source)
        image.load()
    except (UnidentifiedImageError, OSError):
        raise ValidationError("Uploaded file is not a valid image")
    return _normalise(image)


def to_webp(image: Image.Image, size: tuple[int, int] | None, quality: int) -> bytes:
    rendered = ImageOps.fit(image, size) if size else image
    buffer = io.BytesIO()
    rendered.save(buffer, format="WEBP", quality=quality)
    return buffer.getvalue()


# ---------------------------------------------------------------------------
# Local storage
# ---------------------------------------------------------------------------

def upload_root() -> Path:
    root = Path(current_app.config["UPLOAD_FOLDER"])
    if not root.is_absolute():
        root = Path(current_app.root_path).parent / root
    return root


def upload_dir(folder: str) -> Path:
    path = upload_root() / folder
    path.mkdir(parents=True, exist_ok=True)
    return path


def process_local_image(source: Path, output_dir: Path, stem: str) -> list[tuple[str, Path]]:
    """Write the four WebP variants of ``source`` and delete the source file."""
    with Image.open(source) as raw:
        raw.load()
        image = _normalise(raw)

    outputs = []
    for label, suffix, size, quality in LOCAL_VARIANTS:
        target = output_dir / f"{stem}-{suffix}.webp"
        target.write_bytes(to_webp(image, size, quality))
        outputs.append((label, target))

    source.unlink(missing_ok=True)
    return outputs


def shrink_to_webp(source: Path, target: Path, bounds: tuple[int, int] = (800, 600),
                   quality: int = 85) -> Path:
    """Fit ``source`` inside ``bounds`` without enlarging it and save it as WebP."""
    with Image.open(source) as raw:
        raw.load()
        image = _normalise(raw)

    # thumbnail() only ever shrinks.
    image.thumbnail(bounds)
    image.save(target, format="WEBP", quality=quality)
    source.unlink(missing_ok=True)
    return target


def delete_local_variants(folder: Path, stem: str) -> list[str]:
    deleted = []
    for suffix in LOCAL_SUFFIXES:
        path = folder / f"{stem}-{suffix}.webp"
        if path.exists():
            path.unlink()
            deleted.append(path.name)
    return deleted


# ---------------------------------------------------------------------------
# Object storage CDN
# ---------------------------------------------------------------------------

def _s3_client():
    return boto3.client("s3", region_name=current_app.config.get("S3_REGION"))


def cdn_base_url() -> str:
    configured = current_app.config.get("S3_PUBLIC_URL")
    if configured:
        return configured.rstrip("/")
    return f"https://{current_app.config['S3_BUCKET']}.s3.amazonaws.com"


def cdn_folder(upload_type: str) -> str:
    prefix = current_app.config.get("S3_KEY_PREFIX") or "salon"
    return f"{prefix}/{upload_type}s"


def generate_image_urls(public_id: str) -> dict[str, str]:
    base = cdn_base_url()
    urls = {"original": f"{base}/{public_id}.webp"}
    for label, _ in CDN_VARIANTS:
        urls[label] = f"{base}/{public_id}-{label}.webp"
    return urls


def extract_public_id(image_url: str) -> str | None:
    path = urlparse(image_url).path if "://" in image_url else image_url
    match = _VARIANT_SUFFIX_RE.match(path.lstrip("/"))
    return match.group("public_id") if match else None


def upload_to_cdn(storage, public_id: str) -> dict[str, object]:
    """Push an uploaded image and its responsive variants to the bucket."""
    image = open_image(storage.stream)
    bucket = current_app.config["S3_BUCKET"]
    client = _s3_client()

    original = to_webp(image, None, 85)
    objects = [(f"{public_id}.webp", original)]
    for label, size in CDN_VARIANTS:
        objects.append((f"{public_id}-{label}.webp", to_webp(image, size, 80)))

    for key, body in objects:
        client.upload_fileobj(
            io.BytesIO(body),
            bucket,
            key,
            ExtraArgs={"ContentType": "image/webp"},
        )

    urls = generate_image_urls(public_id)
    return {
        "publicId": public_id,
        "originalUrl": urls["original"],
        "urls": urls,
        "width": image.width,
        "height": image.height,
        "format": "webp",
        "bytes": len(original),
    }


def delete_from_cdn(public_id: str) -> bool:
    keys = [f"{public_id}.webp"] + [f"{public_id}-{label}.webp" for label, _ in CDN_VARIANTS]
    try:
        result = _s3_client().delete_objects(
            Bucket=current_app.config["S3_BUCKET"],
            Delete={"Objects": [{"Key": key} for key in keys]},
        )
    except (BotoCoreError, ClientError) as exc:
        current_app.logger.exception("Failed to delete image from storage", exc_info=exc)
        return False
    return not result.get("Errors")
