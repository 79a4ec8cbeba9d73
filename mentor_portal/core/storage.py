import logging
from pathlib import Path

from ..config import get_settings
from ..exceptions import BusinessLogicError

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/webp": "webp",
    "image/gif": "gif",
}


class AvatarStorage:
    """
    Stores one avatar per principal on local disk at
    ``{root}/{user_id}/avatar.{ext}`` and serves it under ``public_path``.
    """

    def __init__(self, root: str = None, public_path: str = None, max_bytes: int = None):
        settings = get_settings()
        self.root = Path(root or settings.AVATAR_STORAGE_DIR)
        self.public_path = (public_path or settings.AVATAR_PUBLIC_PATH).rstrip("/")
        self.max_bytes = max_bytes or settings.AVATAR_MAX_BYTES

    def save(self, user_id: int, content: bytes, content_type: str) -> str:
        """Writes the image, replacing any earlier avatar, and returns its public URL."""
        extension = ALLOWED_IMAGE_TYPES.get(content_type)
        if extension is None:
            raise BusinessLogicError(f"Unsupported image type: {content_type}")
        if not content:
            raise BusinessLogicError("Uploaded file is empty")
        if len(content) > self.max_bytes:
            raise BusinessLogicError(f"Avatar must be at most {self.max_bytes} bytes")

        user_dir = self.root / str(user_id)
        user_dir.mkdir(parents=True, exist_ok=True)
        for old in user_dir.glob("avatar.*"):
            old.unlink()

        filename = f"avatar.{extension}"
        (user_dir / filename).write_bytes(content)
        logger.info(f"Stored avatar for user {user_id} ({len(content)} bytes)")
        return f"{self.public_path}/{user_id}/{filename}"

    def delete(self, user_id: int) -> None:
        user_dir = self.root / str(user_id)
        if not user_dir.exists():
            return
        for old in user_dir.glob("avatar.*"):
            old.unlink()
        user_dir.rmdir()
