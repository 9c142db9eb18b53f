"""Tests for LocalBlobStore."""

from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image as PILImage

from trackspot.domain.exceptions import ConfigurationError, NotFoundError, StorageError
from trackspot.infrastructure.storage import LocalBlobStore, detect_content_type


def image_bytes(fmt: str) -> bytes:
    buffer = BytesIO()
    PILImage.new("RGB", (4, 4), color=(200, 30, 30)).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def blob_store(tmp_path: Path) -> LocalBlobStore:
    return LocalBlobStore(tmp_path / "covers")


class TestLocalBlobStoreInit:
    """Construction."""

    def test_creates_root_directory(self, tmp_path: Path) -> None:
        """Test that the storage directory is created on demand."""
        root = tmp_path / "a" / "b"
        LocalBlobStore(root)
        assert root.is_dir()

    @pytest.mark.parametrize("location", ["", "   "])
    def test_blank_location_is_configuration_error(self, location: str) -> None:
        """Test that a blank location is refused."""
        with pytest.raises(ConfigurationError):
            LocalBlobStore(location)


class TestLocalBlobStoreRoundTrip:
    """store() then load()."""

    async def test_store_returns_relative_reference(
        self, blob_store: LocalBlobStore
    ) -> None:
        """Test that the reference is the name under the root and the file exists."""
        data = image_bytes("JPEG")

        reference = await blob_store.store(data, "USRC17607839.jpg")

        assert reference == "USRC17607839.jpg"
        assert (blob_store.root / reference).read_bytes() == data

    async def test_load_detects_jpeg(self, blob_store: LocalBlobStore) -> None:
        """Test bytes, content type and filename of a stored JPEG."""
        data = image_bytes("JPEG")
        reference = await blob_store.store(data, "USRC17607839.jpg")

        blob = await blob_store.load(reference)

        assert blob.data == data
        assert blob.content_type == "image/jpeg"
        assert blob.filename == "USRC17607839.jpg"

    async def test_content_type_comes_from_bytes_not_extension(
        self, blob_store: LocalBlobStore
    ) -> None:
        """Test that a PNG stored as .jpg is served as image/png."""
        reference = await blob_store.store(image_bytes("PNG"), "USRC17607839.jpg")

        blob = await blob_store.load(reference)

        assert blob.content_type == "image/png"

    async def test_store_overwrites_existing_blob(self, blob_store: LocalBlobStore) -> None:
        """Test that storing the same name twice keeps the latest bytes."""
        await blob_store.store(b"old", "x.jpg")
        await blob_store.store(b"new", "x.jpg")

        assert (await blob_store.load("x.jpg")).data == b"new"
        assert sorted(p.name for p in blob_store.root.iterdir()) == ["x.jpg"]

    async def test_nested_name_is_allowed(self, blob_store: LocalBlobStore) -> None:
        """Test that sub-directories inside the root work."""
        reference = await blob_store.store(b"data", "US/USRC17607839.jpg")

        assert reference == "US/USRC17607839.jpg"
        assert (await blob_store.load(reference)).data == b"data"


class TestLocalBlobStoreSafety:
    """Path traversal and missing files."""

    @pytest.mark.parametrize(
        "name",
        ["../escape.jpg", "a/../../escape.jpg", "/etc/passwd", "..\\escape.jpg", "", "."],
    )
    async def test_store_rejects_names_outside_root(
        self, blob_store: LocalBlobStore, name: str
    ) -> None:
        """Test that traversal names raise StorageError and write nothing outside."""
        with pytest.raises(StorageError):
            await blob_store.store(b"data", name)

        assert not (blob_store.root.parent / "escape.jpg").exists()

    @pytest.mark.parametrize("reference", ["../secret.txt", "/etc/passwd", ""])
    async def test_load_rejects_references_outside_root(
        self, blob_store: LocalBlobStore, reference: str
    ) -> None:
        """Test that traversal references read as not found."""
        (blob_store.root.parent / "secret.txt").write_text("secret")

        with pytest.raises(NotFoundError):
            await blob_store.load(reference)

    async def test_load_missing_file_is_not_found(self, blob_store: LocalBlobStore) -> None:
        """Test that an unknown reference is a NotFoundError."""
        with pytest.raises(NotFoundError):
            await blob_store.load("missing.jpg")


class TestDetectContentType:
    """Fallback chain for content types."""

    def test_unknown_bytes_fall_back_to_extension(self) -> None:
        """Test that non-image bytes use the file extension."""
        assert detect_content_type(b"not an image", "cover.png") == "image/png"

    def test_unknown_bytes_and_extension_are_octet_stream(self) -> None:
        """Test the final fallback."""
        assert detect_content_type(b"???", "blob.unknownext") == "application/octet-stream"
