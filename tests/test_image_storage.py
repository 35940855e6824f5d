"""
tests/test_image_storage.py -- upload limits and tolerant deletion.
"""

from __future__ import annotations

import asyncio
import io

import pytest
from fastapi import UploadFile
from starlette.datastructures import Headers

from easylaptop.core.errors import ValidationError
from easylaptop.services.image_storage import ImageStorage


def _upload(name: str, data: bytes, content_type: str = "image/png") -> UploadFile:
    return UploadFile(file=io.BytesIO(data), filename=name, headers=Headers({"content-type": content_type}))


@pytest.fixture
def storage(settings, tmp_path) -> ImageStorage:
    return ImageStorage(settings.model_copy(update={"media_root": tmp_path, "max_image_bytes": 1024}))


def test_saves_files_and_returns_references(storage: ImageStorage, tmp_path) -> None:
    refs = asyncio.run(storage.save_uploads([_upload("a.PNG", b"one"), _upload("b.jpg", b"two", "image/jpeg")]))
    assert len(refs) == 2
    assert all(ref.startswith("/uploads/laptop-") for ref in refs)
    assert refs[0].endswith(".png")
    assert storage.path_for(refs[0]).read_bytes() == b"one"
    assert storage.path_for(refs[1]).read_bytes() == b"two"
    assert len(list(tmp_path.iterdir())) == 2


def test_empty_file_parts_are_ignored(storage: ImageStorage) -> None:
    assert asyncio.run(storage.save_uploads([_upload("", b"")])) == []


def test_too_many_files_writes_nothing(storage: ImageStorage, tmp_path) -> None:
    uploads = [_upload(f"{i}.png", b"x") for i in range(6)]
    with pytest.raises(ValidationError):
        asyncio.run(storage.save_uploads(uploads))
    assert list(tmp_path.iterdir()) == []


def test_oversized_file_fails_whole_batch(storage: ImageStorage, tmp_path) -> None:
    uploads = [_upload("small.png", b"x"), _upload("big.png", b"x" * 1025)]
    with pytest.raises(ValidationError):
        asyncio.run(storage.save_uploads(uploads))
    assert list(tmp_path.iterdir()) == []


def test_non_image_rejected(storage: ImageStorage) -> None:
    with pytest.raises(ValidationError):
        asyncio.run(storage.save_uploads([_upload("notes.txt", b"hello", "text/plain")]))


def test_delete_tolerates_missing_and_foreign_refs(storage: ImageStorage) -> None:
    (ref,) = asyncio.run(storage.save_uploads([_upload("a.png", b"one")]))
    path = storage.path_for(ref)

    storage.delete([ref, "/uploads/laptop-missing.png", "https://elsewhere.example/x.png"])
    assert not path.exists()
    # second delete of the same ref only logs
    storage.delete([ref])


def test_path_for_stays_inside_media_root(storage: ImageStorage, tmp_path) -> None:
    assert storage.path_for("/uploads/../../etc/passwd") == tmp_path / "passwd"
    assert storage.path_for("/elsewhere/a.png") is None
