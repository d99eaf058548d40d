import logging
import uuid
from datetime import timedelta

import requests
from django.conf import settings
from django.core.files.storage import default_storage
from django.utils import timezone

logger = logging.getLogger(__name__)

PENDING_DIR = "pending-uploads"


class UploadError(Exception):
    pass


def stash(uploaded_file):
    """Keep a file the user picked until they confirm the upload."""
    sweep()
    name = f"{PENDING_DIR}/{uuid.uuid4().hex}/{uploaded_file.name}"
    return default_storage.save(name, uploaded_file)


def discard(stored_name):
    if stored_name and default_storage.exists(stored_name):
        default_storage.delete(stored_name)


def sweep(max_age=None, now=None):
    """Delete pending files older than `max_age` seconds.

    Returns how many files were deleted.
    """
    if max_age is None:
        max_age = settings.PENDING_UPLOAD_MAX_AGE
    cutoff = (now or timezone.now()) - timedelta(seconds=max_age)

    if not default_storage.exists(PENDING_DIR):
        return 0

    removed = 0
    folders, _ = default_storage.listdir(PENDING_DIR)
    for folder in folders:
        prefix = f"{PENDING_DIR}/{folder}"
        _, names = default_storage.listdir(prefix)
        kept = 0
        for name in names:
            path = f"{prefix}/{name}"
            if default_storage.get_modified_time(path) < cutoff:
                default_storage.delete(path)
                removed += 1
            else:
                kept += 1
        if not kept:
            default_storage.delete(prefix)

    if removed:
        logger.info("Swept %s stale pending upload(s)", removed)
    return removed


def upload(stored_name, filename, mimetype, url=None, preset=None, timeout=None):
    """Send a stashed file to the media host and return its public URL."""
    url = url or settings.UPLOAD_URL
    if not url:
        raise UploadError("No upload endpoint is configured")

    try:
        fh = default_storage.open(stored_name, "rb")
    except OSError as exc:
        raise UploadError(f"Pending file {stored_name} is gone") from exc

    with fh:
        try:
            response = requests.post(
                url,
                files={"file": (filename, fh, mimetype)},
                data={"upload_preset": preset or settings.UPLOAD_PRESET},
                timeout=timeout or settings.UPLOAD_TIMEOUT,
            )
        except requests.RequestException as exc:
            logger.warning("Upload of %s failed: %s", filename, exc)
            raise UploadError(str(exc)) from exc

    if not response.ok:
        logger.warning(
            "Upload of %s failed with status %s: %s",
            filename, response.status_code, response.text,
        )
        raise UploadError(f"Upload failed with status: {response.status_code}")

    try:
        secure_url = response.json().get("secure_url")
    except ValueError as exc:
        raise UploadError("Upload response was not JSON") from exc
    if not secure_url:
        raise UploadError("Upload response had no secure_url")

    logger.info("Uploaded %s to %s", filename, secure_url)
    return secure_url
