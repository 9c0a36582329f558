import logging
import os
import re
from datetime import datetime, timezone

from werkzeug.utils import secure_filename

from services.exceptions import StoredFileNotFoundError, UploadValidationError, WorkbookReadError


logger = logging.getLogger(__name__)

# Stored names must match this before they are joined onto the upload folder
ALLOWED_NAME_RE = re.compile(r"^[\w.\- %()]+$", re.ASCII)
XLSX_EXTENSION = ".xlsx"
XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _base_name(name):
    # browsers on Windows may send the full client path
    return re.split(r"[\\/]", name or "")[-1].strip()


def validate_file(file):
    if not file or not file.filename or file.filename.strip() == '':
        return False
    return True


def validate_filename(name):
    """
    Check a stored-file name against the allow-list and extension.

    Path separators aren't in the allow-list, so anything that isn't a bare base name is rejected.

    Returns:
        str: The validated name.

    Raises:
        UploadValidationError: If the name is empty, has disallowed characters, or isn't .xlsx.
    """
    base = (name or "").strip()
    if not base or base.startswith("..") or not ALLOWED_NAME_RE.match(base):
        raise UploadValidationError("Bad filename")
    if not base.lower().endswith(XLSX_EXTENSION):
        raise UploadValidationError("Only .xlsx allowed")
    return base


def ensure_folder(upload_folder):
    os.makedirs(upload_folder, exist_ok=True)
    return upload_folder


def list_files(upload_folder):
    """
    List stored .xlsx files, newest first.

    Returns:
        list[dict]: {"name", "size", "mtime"} with mtime as an aware UTC datetime.
    """
    ensure_folder(upload_folder)
    files = []
    for name in os.listdir(upload_folder):
        if not name.lower().endswith(XLSX_EXTENSION):
            continue
        path = os.path.join(upload_folder, name)
        if not os.path.isfile(path):
            continue
        st = os.stat(path)
        files.append({
            "name": name,
            "size": st.st_size,
            "mtime": datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
        })
    files.sort(key=lambda f: f["mtime"], reverse=True)
    return files


def stored_path(upload_folder, name):
    """Validated absolute path of an existing stored file."""
    safe_name = validate_filename(name)
    path = os.path.join(upload_folder, safe_name)
    if not os.path.isfile(path):
        raise StoredFileNotFoundError("Not found")
    return path


def read_file_bytes(upload_folder, name):
    path = stored_path(upload_folder, name)
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as exc:
        raise WorkbookReadError(f"Could not read {os.path.basename(path)}: {exc}") from exc


def _unique_name(upload_folder, name):
    stem, ext = os.path.splitext(name)
    candidate = name
    i = 1
    while os.path.exists(os.path.join(upload_folder, candidate)):
        candidate = f"{stem}-{i}{ext}"
        i += 1
    return candidate


def storage_name(original_name, now=None):
    """
    Build the name an upload is stored under: "<YYYYmmdd-HHMMSS>_<sanitized base name>".

    Raises:
        UploadValidationError: If the name is not an .xlsx file or sanitizes to nothing.
    """
    base = _base_name(original_name)
    if not base.lower().endswith(XLSX_EXTENSION):
        raise UploadValidationError("Only .xlsx allowed")
    cleaned = secure_filename(base)
    stem = os.path.splitext(cleaned)[0]
    if not stem:
        raise UploadValidationError("Bad filename")
    ts = (now or datetime.now()).strftime("%Y%m%d-%H%M%S")
    return f"{ts}_{stem}{XLSX_EXTENSION}"


def save_upload(upload_folder, file, now=None):
    """
    Persist an uploaded werkzeug FileStorage under a timestamped, collision-free name.

    Returns:
        tuple[str, int]: Stored name and size in bytes.
    """
    if not validate_file(file):
        raise UploadValidationError("Missing file")
    name = storage_name(file.filename, now=now)
    ensure_folder(upload_folder)
    name = _unique_name(upload_folder, name)
    dest = os.path.join(upload_folder, name)
    file.save(dest)
    size = os.path.getsize(dest)
    if size == 0:
        os.remove(dest)
        raise UploadValidationError("Empty file")
    logger.info(f"Stored upload '{file.filename}' as {name} ({size} bytes)")
    return name, size


def delete_file(upload_folder, name):
    path = stored_path(upload_folder, name)
    os.remove(path)
    logger.info(f"Deleted {os.path.basename(path)}")
    return os.path.basename(path)
