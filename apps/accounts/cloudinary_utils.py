"""
Cloudinary integration utilities.

``CloudinaryImageHost`` wraps configuration, validation, slot-specific
transformations, upload and best-effort deletion so the profile workflow
only deals in URLs.  It is built per request from Django settings (or
handed a fake in tests) rather than living as a module-level singleton.
"""

import base64
import binascii
import logging
import os
import re
import time
import uuid
from urllib.parse import urlparse

from django.conf import settings
from django.core.files.uploadedfile import UploadedFile

from .exceptions import InvalidInput, UpstreamFailure

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
ALLOWED_IMAGE_TYPES = frozenset([
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/webp",
])
ALLOWED_IMAGE_EXTENSIONS = frozenset([".jpg", ".jpeg", ".png", ".webp"])

PROFILE = "profile"
COVER = "cover"
IMAGE_SLOTS = (PROFILE, COVER)

# Slot → (sub-folder, transformation chain)
SLOT_PRESETS = {
    PROFILE: (
        "profiles",
        [
            {"width": 400, "height": 400, "crop": "fill", "gravity": "face"},
            {"quality": "auto:good"},
            {"format": "webp"},
        ],
    ),
    COVER: (
        "covers",
        [
            {"width": 1200, "height": 400, "crop": "fill"},
            {"quality": "auto:good"},
            {"format": "webp"},
        ],
    ),
}

DATA_URI_RE = re.compile(
    r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<data>.+)$", re.DOTALL
)
VERSION_SEGMENT_RE = re.compile(r"^v\d+$")


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

class ImageValidationError(InvalidInput):
    """Raised when an image payload fails pre-upload checks."""



def inspect_image(image):
    """
    Return ``(content_type, size_in_bytes)`` for an image payload.

    Accepts either an ``UploadedFile`` from ``request.FILES`` or a base64
    ``data:`` URI string from a JSON body.
    """
    if isinstance(image, UploadedFile):
        return image.content_type, image.size

    if isinstance(image, str):
        match = DATA_URI_RE.match(image.strip())
        if match:
            try:
                raw = base64.b64decode(match["data"], validate=True)
            except (binascii.Error, ValueError):
                raise ImageValidationError("Image data is not valid base64.")
            return match["mime"].lower(), len(raw)

    raise ImageValidationError(
        "Image must be an uploaded file or a base64 data URI."
    )


def validate_image(image, *, max_size):
    """
    Validate an image payload before sending it to Cloudinary.

    Raises
    ------
    ImageValidationError
        If content type, file extension or size is unacceptable.
    """
    content_type, size = inspect_image(image)

    if isinstance(image, UploadedFile):
        extension = os.path.splitext(image.name or "")[1].lower()
        if extension not in ALLOWED_IMAGE_EXTENSIONS:
            allowed = ", ".join(sorted(ALLOWED_IMAGE_EXTENSIONS))
            raise ImageValidationError(
                f"Unsupported file extension '{extension}'. Allowed: {allowed}"
            )

    if content_type not in ALLOWED_IMAGE_TYPES:
        allowed = ", ".join(sorted(ALLOWED_IMAGE_TYPES))
        raise ImageValidationError(
            f"Unsupported file type '{content_type}'. Allowed: {allowed}"
        )

    if size > max_size:
        mb = max_size // (1024 * 1024)
        raise ImageValidationError(
            f"Image file size ({size:,} bytes) exceeds the {mb} MB limit."
        )


def extract_public_id(image_url):
    """
    Recover the Cloudinary public ID from a delivery URL.

    ``https://res.cloudinary.com/<cloud>/image/upload/v17/<id>.webp`` gives
    ``<id>``.  Returns ``None`` for URLs that are not Cloudinary uploads.
    """
    if not image_url:
        return None
    segments = [s for s in urlparse(image_url).path.split("/") if s]
    if "upload" not in segments:
        return None

    tail = segments[segments.index("upload") + 1:]
    if tail and VERSION_SEGMENT_RE.match(tail[0]):
        tail = tail[1:]
    if not tail:
        return None

    public_id = "/".join(tail)
    return re.sub(r"\.[^/.]+$", "", public_id)


# ---------------------------------------------------------------------------
# Image host
# ---------------------------------------------------------------------------

class CloudinaryImageHost:
    """Upload / delete profile and cover images on Cloudinary."""

    def __init__(self, *, cloud_name, api_key, api_secret, folder, max_size):
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.folder = (folder or "").strip("/")
        self.max_size = max_size

    @classmethod
    def from_settings(cls):
        return cls(
            cloud_name=getattr(settings, "CLOUDINARY_CLOUD_NAME", ""),
            api_key=getattr(settings, "CLOUDINARY_API_KEY", ""),
            api_secret=getattr(settings, "CLOUDINARY_API_SECRET", ""),
            folder=getattr(settings, "CLOUDINARY_FOLDER", "user-uploads"),
            max_size=getattr(settings, "MAX_UPLOAD_SIZE", 10 * 1024 * 1024),
        )

    def validate(self, image):
        validate_image(image, max_size=self.max_size)

    def generate_public_id(self, slot):
        """``[<folder>/]<slot>s/<epoch ms>-<random hex>``, unique per upload."""
        subfolder, _ = SLOT_PRESETS[slot]
        stamp = int(time.time() * 1000)
        public_id = f"{subfolder}/{stamp}-{uuid.uuid4().hex}"
        if self.folder:
            public_id = f"{self.folder}/{public_id}"
        return public_id

    def _configure(self):
        """
        Configure the ``cloudinary`` library from this host's credentials.

        Called once per operation rather than at import time so that tests
        can override settings freely.
        """
        if not (self.cloud_name and self.api_key and self.api_secret):
            raise UpstreamFailure("Image hosting is not configured.")

        import cloudinary

        cloudinary.config(
            cloud_name=self.cloud_name,
            api_key=self.api_key,
            api_secret=self.api_secret,
            secure=True,
        )

    def upload(self, image, slot):
        """
        Upload ``image`` into ``slot`` and return its HTTPS URL.

        Raises
        ------
        ImageValidationError
            If the payload fails type/size checks.
        UpstreamFailure
            If Cloudinary is unconfigured or the upload itself fails.
        """
        if slot not in SLOT_PRESETS:
            raise ValueError(f"Unknown image slot '{slot}'.")
        self.validate(image)
        self._configure()

        import cloudinary.uploader

        _, transformation = SLOT_PRESETS[slot]
        public_id = self.generate_public_id(slot)

        try:
            result = cloudinary.uploader.upload(
                image,
                public_id=public_id,
                resource_type="image",
                format="webp",
                transformation=transformation,
                overwrite=True,
                invalidate=True,
            )
        except Exception as exc:
            logger.error("Cloudinary upload failed for %s: %s", public_id, exc)
            raise UpstreamFailure() from exc

        url = result.get("secure_url") if result else None
        if not url:
            logger.error("Cloudinary upload for %s returned no URL.", public_id)
            raise UpstreamFailure("Upload succeeded but no secure URL was returned.")

        logger.info("Cloudinary %s upload succeeded: %s", slot, url)
        return url

    def delete(self, image_url):
        """
        Best-effort removal of a previously uploaded image.

        Returns ``True`` when Cloudinary accepted the request.  Failures are
        logged and never raised; callers must not depend on the outcome.
        """
        public_id = extract_public_id(image_url)
        if not public_id:
            return False

        try:
            self._configure()

            import cloudinary.uploader

            cloudinary.uploader.destroy(public_id, invalidate=True)
        except Exception as exc:
            logger.warning("Failed to delete Cloudinary image %s: %s", public_id, exc)
            return False

        logger.info("Deleted Cloudinary image: %s", public_id)
        return True
