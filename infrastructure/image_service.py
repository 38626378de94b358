"""Center-square cropping of captured stills using Pillow.

The crop is deterministic: the central `crop_size` square is cut out at full
resolution and re-encoded as JPEG. Nothing is scaled or padded.
"""

from __future__ import annotations

from pathlib import Path

from PIL import Image, UnidentifiedImageError
from loguru import logger

from core.errors import CaptureFailed, ImageTooSmall, StorageFailure
from core.models import CROP_SIZE_PX, CapturedArtifact
from core.services.interfaces import ICropService
from infrastructure.settings import DEFAULT_JPEG_QUALITY
from infrastructure.storage import StorageLayout, delete_quietly


def center_box(width: int, height: int, side: int) -> tuple[int, int, int, int]:
    """Return the (left, top, right, bottom) box of the centered `side` square."""
    if width < side or height < side:
        raise ImageTooSmall(width, height, side)
    left = (width - side) // 2
    top = (height - side) // 2
    return left, top, left + side, top + side


class CropService(ICropService):
    """Crops the central square of a still and writes it as a new artifact.

    The application always uses `CROP_SIZE_PX`; `crop_size` is only overridden
    by tests that work with small fixture images.
    """

    def __init__(
        self,
        storage: StorageLayout,
        crop_size: int = CROP_SIZE_PX,
        jpeg_quality: int = DEFAULT_JPEG_QUALITY,
    ) -> None:
        self._storage = storage
        self._crop_size = int(crop_size)
        self._quality = max(1, min(100, int(jpeg_quality)))

    @property
    def crop_size(self) -> int:
        return self._crop_size

    def crop_center(self, source: Path) -> CapturedArtifact:
        """Crop `source` and persist the result under the pictures directory.

        Raises:
            ImageTooSmall: either side of the source is below the crop size.
            CaptureFailed: the source cannot be decoded.
            StorageFailure: the source or the output cannot be read/written.
        """
        try:
            with Image.open(source) as im:
                box = center_box(im.width, im.height, self._crop_size)
                cropped = im.crop(box)
        except UnidentifiedImageError as ex:
            raise CaptureFailed(f"Cannot decode still {source}") from ex
        except OSError as ex:
            raise StorageFailure(f"Cannot read still ({ex})", source) from ex

        if cropped.mode != "RGB":
            cropped = cropped.convert("RGB")

        out_path = self._storage.new_cropped_path()
        try:
            with out_path.open("wb") as f:
                cropped.save(f, "JPEG", quality=self._quality, subsampling=0)
        except OSError as ex:
            delete_quietly(out_path)
            raise StorageFailure(f"Cannot write cropped image ({ex})", out_path) from ex

        created_ms = int(out_path.stat().st_mtime_ns // 1_000_000)
        logger.debug("Cropped {} -> {} ({}px)", source, out_path, self._crop_size)
        return CapturedArtifact(path=out_path, created_at_ms=created_ms, side_px=self._crop_size)
