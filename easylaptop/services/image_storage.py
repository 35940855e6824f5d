"""
Listing image files on local disk.

Uploads are checked as a batch (count, content type, size) before any file
is written, so a rejected upload leaves nothing behind. Stored files are
addressed by public references like "/uploads/laptop-<hex>.jpg", which the
app serves as static files.
"""

import logging
import os
import uuid
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from fastapi import UploadFile

from easylaptop.core.config import Settings
from easylaptop.core.errors import ValidationError

logger = logging.getLogger(__name__)


class ImageStorage:
    def __init__(self, settings: Settings) -> None:
        self.root = Path(settings.media_root)
        self.url_prefix = settings.media_url.rstrip("/")
        self.max_files = settings.max_images
        self.max_bytes = settings.max_image_bytes

    def path_for(self, ref: str) -> Optional[Path]:
        """Map a public reference back to its file, or None if it is not ours."""
        prefix = f"{self.url_prefix}/"
        if not ref or not ref.startswith(prefix):
            return None
        # only the final component; references never point into subdirectories
        name = os.path.basename(ref[len(prefix):])
        if not name:
            return None
        return self.root / name

    async def save_uploads(self, files: Sequence[UploadFile]) -> List[str]:
        # browsers send an empty part when no file was picked
        uploads = [f for f in files if f.filename]
        if not uploads:
            return []

        if len(uploads) > self.max_files:
            raise ValidationError(f"You can upload at most {self.max_files} images")

        max_mb = self.max_bytes // (1024 * 1024)
        payloads = []
        for upload in uploads:
            content_type = upload.content_type or ""
            if not content_type.startswith("image/"):
                raise ValidationError("Only image files are allowed")

            contents = await upload.read(self.max_bytes + 1)
            if len(contents) > self.max_bytes:
                raise ValidationError(f"Image {upload.filename} is larger than {max_mb} MB")

            ext = os.path.splitext(upload.filename)[1].lower()
            payloads.append((ext, contents))

        self.root.mkdir(parents=True, exist_ok=True)

        written: List[Path] = []
        try:
            for ext, contents in payloads:
                file_path = self.root / f"laptop-{uuid.uuid4().hex}{ext}"
                file_path.write_bytes(contents)
                written.append(file_path)
        except OSError:
            for file_path in written:
                file_path.unlink(missing_ok=True)
            raise

        logger.debug("Stored %d image(s) in %s", len(written), self.root)
        return [f"{self.url_prefix}/{p.name}" for p in written]

    def delete(self, refs: Iterable[str]) -> None:
        """Remove the files behind refs. Problems are logged, never raised."""
        for ref in refs:
            file_path = self.path_for(ref)
            if file_path is None:
                logger.warning("Skipping image reference outside media root: %s", ref)
                continue
            try:
                file_path.unlink()
            except FileNotFoundError:
                logger.warning("Image file already missing: %s", file_path)
            except OSError as exc:
                logger.warning("Could not delete image %s: %s", file_path, exc)
