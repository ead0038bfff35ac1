"""Read a request body that may be JSON, urlencoded or multipart (with files)."""

import json
from typing import Any

from fastapi import Request, UploadFile, status

from app.core.errors import AppError, ValidationError
from app.services.media import IncomingFile

# Hard cap on any single uploaded part, above the per-type media limits.
MAX_PART_BYTES = 64 * 1024 * 1024


def _is_upload_file(obj: object) -> bool:
    """True if obj is an uploaded file (UploadFile or file-like with filename and read)."""
    if isinstance(obj, UploadFile):
        return True
    return (
        hasattr(obj, "read")
        and callable(getattr(obj, "read", None))
        and hasattr(obj, "filename")
    )


async def read_payload(request: Request) -> tuple[dict[str, Any], dict[str, list[IncomingFile]]]:
    """
    Return (fields, files) from the body.

    JSON bodies must be objects. Multipart file parts are read into memory and
    grouped by field name; repeated text fields keep their last value.
    """
    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()
    if content_type in ("", "application/json"):
        raw = await request.body()
        if not raw.strip():
            return {}, {}
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ValidationError(f"Invalid JSON: {e!s}") from e
        if not isinstance(data, dict):
            raise ValidationError("JSON body must be an object.")
        return data, {}
    if content_type in ("multipart/form-data", "application/x-www-form-urlencoded"):
        form = await request.form()
        fields: dict[str, Any] = {}
        files: dict[str, list[IncomingFile]] = {}
        for key, value in form.multi_items():
            if _is_upload_file(value):
                filename = getattr(value, "filename", None) or ""
                if not filename:
                    continue
                data = await value.read()
                if len(data) > MAX_PART_BYTES:
                    raise ValidationError(f"File '{filename}' is too large.")
                mime = getattr(value, "content_type", None) or ""
                files.setdefault(key, []).append(IncomingFile(filename, mime, data))
            else:
                fields[key] = value
        return fields, files
    raise AppError(
        "Content-Type must be application/json or multipart/form-data.",
        status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
    )


def collect_files(files: dict[str, list[IncomingFile]], names: tuple[str, ...]) -> list[IncomingFile]:
    """All uploaded parts under any of the given field names, in alias order."""
    out: list[IncomingFile] = []
    for name in names:
        out.extend(files.get(name, []))
    return out
