from PIL import Image
import pytest

from core.errors import CaptureFailed, ImageTooSmall, StorageFailure
from infrastructure.image_service import CropService, center_box


def _close(a, b, tol=12):
    return all(abs(x - y) <= tol for x, y in zip(a, b))


def test_center_box_integer_division():
    assert center_box(640, 480, 250) == (195, 115, 445, 365)
    assert center_box(251, 250, 250) == (0, 0, 250, 250)
    assert center_box(250, 250, 250) == (0, 0, 250, 250)


def test_center_box_too_small():
    with pytest.raises(ImageTooSmall) as exc:
        center_box(249, 250, 250)
    assert exc.value.width == 249
    assert exc.value.required == 250


def test_crop_produces_250_square_jpeg(cropper, make_image, storage):
    src = make_image((640, 480))
    artifact = cropper.crop_center(src)

    assert artifact.path.exists()
    assert artifact.path.parent == storage.files_dir / "Pictures"
    assert artifact.side_px == 250
    assert artifact.uri.startswith("file://")
    with Image.open(artifact.path) as im:
        assert im.format == "JPEG"
        assert im.size == (250, 250)


def test_crop_takes_the_central_region(cropper, make_image):
    src = make_image((640, 480))
    artifact = cropper.crop_center(src)
    with Image.open(src) as original, Image.open(artifact.path) as cropped:
        # cropped (0,0) corresponds to original (195,115); compare a few samples
        for x, y in [(0, 0), (125, 125), (249, 249), (10, 200)]:
            assert _close(cropped.getpixel((x, y)), original.getpixel((195 + x, 115 + y)))


def test_exact_size_source_is_identity_in_pixels(cropper, make_image):
    src = make_image((250, 250))
    artifact = cropper.crop_center(src)
    with Image.open(src) as original, Image.open(artifact.path) as cropped:
        assert cropped.size == (250, 250)
        for x, y in [(0, 0), (60, 190), (249, 0), (249, 249)]:
            assert _close(cropped.getpixel((x, y)), original.getpixel((x, y)))


def test_too_small_source_writes_nothing(cropper, make_image, storage):
    src = make_image((249, 250))
    with pytest.raises(ImageTooSmall):
        cropper.crop_center(src)
    pictures = storage.files_dir / "Pictures"
    assert not pictures.exists() or list(pictures.iterdir()) == []


def test_non_rgb_source_is_converted(cropper, make_image):
    src = make_image((300, 300), name="src.png", mode="RGBA")
    artifact = cropper.crop_center(src)
    with Image.open(artifact.path) as im:
        assert im.mode == "RGB"
        assert im.size == (250, 250)


def test_undecodable_source_is_capture_failure(cropper, tmp_path):
    bogus = tmp_path / "bogus.jpg"
    bogus.write_bytes(b"not an image")
    with pytest.raises(CaptureFailed):
        cropper.crop_center(bogus)


def test_custom_crop_size_and_quality(storage, make_image):
    service = CropService(storage, crop_size=100, jpeg_quality=150)
    artifact = service.crop_center(make_image((120, 100)))
    assert artifact.side_px == 100
    with Image.open(artifact.path) as im:
        assert im.size == (100, 100)


def test_failed_save_removes_partial_output(cropper, make_image, storage, monkeypatch):
    src = make_image((300, 300))

    def _disk_full(self, fp, *args, **kwargs):
        fp.write(b"\xff\xd8partial")
        raise OSError(28, "No space left on device")

    monkeypatch.setattr(Image.Image, "save", _disk_full)
    with pytest.raises(StorageFailure):
        cropper.crop_center(src)
    assert list((storage.files_dir / "Pictures").glob("image_*.jpg")) == []


def test_unwritable_pictures_dir_is_storage_failure(cropper, make_image, tmp_path):
    src = make_image((300, 300))
    (tmp_path / "files").write_text("not a directory", encoding="utf-8")
    with pytest.raises(StorageFailure):
        cropper.crop_center(src)
