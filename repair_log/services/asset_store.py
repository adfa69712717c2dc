"""Asset store: the folder holding uploaded before/after photos."""

import logging
import os
import secrets
import time

from werkzeug.utils import secure_filename

from ..domain import UploadedAsset
from ..errors import AssetError

logger = logging.getLogger(__name__)


class AssetStore:
    def __init__(self, root: str):
        self.root = root

    def open(self) -> None:
        """Create the upload folder at startup instead of on the first upload."""
        if not self.root:
            raise RuntimeError("UPLOAD_FOLDER is not configured in app.config")
        os.makedirs(self.root, exist_ok=True)

    def generate_ref(self, asset: UploadedAsset) -> str:
        # <field>-<ns timestamp>-<random 9 digits><ext>, e.g. photo_before-1729340000000000000-123456789.jpg
        field = secure_filename(asset.field) or "photo"
        return f"{field}-{time.time_ns()}-{secrets.randbelow(10**9):09d}{asset.extension}"

    def path_for(self, ref: str) -> str:
        # refs are generated names; anything that would leave the folder is refused
        if not ref or secure_filename(ref) != ref:
            raise AssetError(f"invalid asset reference: {ref!r}")
        return os.path.join(self.root, ref)

    def save(self, asset: UploadedAsset) -> str:
        """Write the asset under a fresh name and return that name."""
        ref = self.generate_ref(asset)
        path = self.path_for(ref)
        try:
            # "xb": never overwrite an existing file
            f = open(path, "xb")
        except OSError as e:
            raise AssetError(f"could not store {asset.field}: {e.strerror or e}") from e

        try:
            with f:
                f.write(asset.data)
        except OSError as e:
            # a partially written file must not stay behind
            try:
                os.remove(path)
            except OSError:
                logger.warning("could not remove partial asset %s", path, exc_info=True)
            raise AssetError(f"could not store {asset.field}: {e.strerror or e}") from e

        logger.info("stored asset %s (%d bytes)", ref, len(asset.data))
        return ref

    def remove(self, ref: str) -> bool:
        """
        Delete one asset.
        Returns False when the file is already gone; other failures raise AssetError.
        """
        path = self.path_for(ref)
        try:
            os.remove(path)
        except FileNotFoundError:
            return False
        except OSError as e:
            raise AssetError(f"could not remove asset {ref}: {e.strerror or e}") from e
        logger.info("removed asset %s", ref)
        return True
