"""
Library file service: uploads, approval queue, downloads, deletion.

Files are written under settings.UPLOAD_DIR with a random name; the stored
storage_key is relative to that directory and never derived from user input.
"""

import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

import magic
from fastapi import UploadFile
from loguru import logger
from sqlalchemy.orm import Session

import repositories.db_models as db_models
from helpers.sanitization import sanitize_filename, sanitize_plain_text
from models.config import settings
from models.exceptions import (
    FileNotFoundException,
    GroupNotFoundException,
    InvalidUploadException,
    NotContentOwnerException,
)
from repositories.file_repository import FileRepository
from repositories.group_repository import GroupRepository
from services.admin_alert_service import AdminAlertService

LIBRARY_EXTENSIONS = frozenset({"pdf", "doc", "docx", "jpg", "jpeg", "png"})

# Content types libmagic may report for each accepted extension
EXTENSION_MIME_TYPES = {
    "pdf": frozenset({"application/pdf"}),
    "doc": frozenset(
        {"application/msword", "application/x-ole-storage", "application/CDFV2"}
    ),
    "docx": frozenset(
        {
            "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
            "application/zip",
        }
    ),
    "jpg": frozenset({"image/jpeg"}),
    "jpeg": frozenset({"image/jpeg"}),
    "png": frozenset({"image/png"}),
    "gif": frozenset({"image/gif"}),
    "mp3": frozenset({"audio/mpeg"}),
    "wav": frozenset({"audio/x-wav", "audio/wav", "audio/vnd.wave"}),
    "m4a": frozenset({"audio/mp4", "audio/x-m4a", "video/mp4"}),
    "ogg": frozenset({"audio/ogg", "application/ogg", "video/ogg"}),
    "webm": frozenset({"video/webm", "audio/webm"}),
}

LIBRARY_SUBDIR = "library"
MEDIA_SUBDIR = "media"


@dataclass(frozen=True)
class StoredUpload:
    """Result of writing an upload to disk."""

    storage_key: str
    original_name: str
    extension: str
    size: int


def file_extension(filename: Optional[str]) -> str:
    """Lower-case extension without the dot, or "" when there is none."""
    if not filename or "." not in filename:
        return ""
    return filename.rsplit(".", 1)[-1].lower()


class FileService:
    """Service for library file business logic and upload storage."""

    @staticmethod
    def storage_path(storage_key: str) -> Path:
        return Path(settings.UPLOAD_DIR) / storage_key

    @staticmethod
    def store_upload(
        upload: UploadFile, subdir: str, allowed_extensions: Iterable[str]
    ) -> StoredUpload:
        """
        Validate an upload and write it under UPLOAD_DIR/subdir.

        Args:
            upload: Multipart file from the request
            subdir: Target subdirectory (library or media)
            allowed_extensions: Accepted lower-case extensions

        Returns:
            StoredUpload describing the written file

        Raises:
            InvalidUploadException: If the upload fails validation
        """
        original_name = sanitize_filename(upload.filename)
        extension = file_extension(original_name)
        allowed = frozenset(allowed_extensions)
        if extension not in allowed:
            raise InvalidUploadException(
                f"File type '.{extension}' not allowed. "
                f"Allowed: {', '.join(sorted(allowed))}"
            )

        # Read one byte past the limit to detect oversize without loading more
        content = upload.file.read(settings.max_upload_bytes + 1)
        if not content:
            raise InvalidUploadException("Uploaded file is empty")
        if len(content) > settings.max_upload_bytes:
            raise InvalidUploadException(
                f"File size exceeds {settings.MAX_UPLOAD_SIZE_MB}MB limit"
            )

        # Validate actual file content using python-magic (not just the name)
        detected_type = magic.from_buffer(content, mime=True)
        if detected_type not in EXTENSION_MIME_TYPES.get(extension, ()):
            raise InvalidUploadException(
                f"File content '{detected_type}' does not match '.{extension}'"
            )

        storage_key = f"{subdir}/{uuid.uuid4().hex}.{extension}"
        path = FileService.storage_path(storage_key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)

        return StoredUpload(
            storage_key=storage_key,
            original_name=original_name,
            extension=extension,
            size=len(content),
        )

    @staticmethod
    def remove_stored_file(storage_key: str) -> None:
        """Delete a stored file from disk; a missing file is only logged."""
        path = FileService.storage_path(storage_key)
        try:
            path.unlink()
        except FileNotFoundError:
            logger.warning(f"Stored file already gone: {storage_key}")

    @staticmethod
    def upload_file(
        db: Session,
        uploader: db_models.User,
        upload: UploadFile,
        subject: Optional[str] = None,
        description: Optional[str] = None,
        visibility: db_models.FileVisibility = db_models.FileVisibility.PUBLIC,
        group_id: Optional[int] = None,
    ) -> db_models.LibraryFile:
        """
        Add a document to the library.

        When FILES_REQUIRE_APPROVAL is on, the file starts unapproved and the
        admins get an ntfy alert.

        Raises:
            InvalidUploadException: If the upload is rejected
            GroupNotFoundException: If group_id does not exist
        """
        if group_id is not None and not GroupRepository(db).exists(group_id):
            raise GroupNotFoundException()

        stored = FileService.store_upload(upload, LIBRARY_SUBDIR, LIBRARY_EXTENSIONS)
        file_repo = FileRepository(db)
        library_file = db_models.LibraryFile(
            uploader_id=uploader.id,
            file_name=stored.original_name,
            file_url="",
            storage_key=stored.storage_key,
            file_type=stored.extension,
            file_size=stored.size,
            subject=sanitize_plain_text(subject) or None,
            description=sanitize_plain_text(description) or None,
            visibility=visibility,
            group_id=group_id,
            approved=not settings.FILES_REQUIRE_APPROVAL,
        )
        file_repo.add(library_file)
        file_repo.flush()
        library_file.file_url = f"/api/files/{library_file.id}/download"
        file_repo.commit()
        file_repo.refresh(library_file)

        logger.info(
            f"File {library_file.id} uploaded by user {uploader.id} "
            f"({stored.size} bytes, approved={library_file.approved})"
        )
        if not library_file.approved:
            AdminAlertService.notify_file_pending(
                library_file.id,
                library_file.file_name,
                f"{uploader.first_name} {uploader.last_name}",
            )
        return library_file

    @staticmethod
    def list_files(db: Session, subject: Optional[str] = None) -> List[db_models.LibraryFile]:
        return FileRepository(db).list_approved(subject)

    @staticmethod
    def list_user_files(db: Session, user_id: int) -> List[db_models.LibraryFile]:
        """A user's approved uploads, as shown on their profile."""
        return [f for f in FileRepository(db).list_by_uploader(user_id) if f.approved]

    @staticmethod
    def list_pending_files(db: Session) -> List[db_models.LibraryFile]:
        return FileRepository(db).list_pending()

    @staticmethod
    def approve_file(db: Session, file_id: int) -> db_models.LibraryFile:
        """
        Approve a pending file. Approving twice is harmless.

        Raises:
            FileNotFoundException: If the file does not exist
        """
        file_repo = FileRepository(db)
        library_file = file_repo.get_by_id(file_id)
        if library_file is None:
            raise FileNotFoundException()
        if not library_file.approved:
            library_file.approved = True
            file_repo.update(library_file)
            logger.info(f"File {file_id} approved")
        return library_file

    @staticmethod
    def get_download(
        db: Session, file_id: int, user: Optional[db_models.User] = None
    ) -> tuple[db_models.LibraryFile, Path]:
        """
        Resolve a download and count it.

        Unapproved files are only downloadable by their uploader and
        moderators.

        Returns:
            (file row, path on disk)

        Raises:
            FileNotFoundException: If the row or the stored file is missing
        """
        file_repo = FileRepository(db)
        library_file = file_repo.get_by_id(file_id)
        if library_file is None:
            raise FileNotFoundException()
        if not library_file.approved and not (
            user is not None
            and (user.is_moderator or user.id == library_file.uploader_id)
        ):
            raise FileNotFoundException()

        path = FileService.storage_path(library_file.storage_key)
        if not path.is_file():
            logger.error(f"File {file_id} missing on disk: {library_file.storage_key}")
            raise FileNotFoundException()

        file_repo.increment_downloads(file_id)
        file_repo.refresh(library_file)
        return library_file, path

    @staticmethod
    def delete_file(db: Session, file_id: int, user: db_models.User) -> None:
        """
        Delete a library file. Teachers and admins can delete any file.

        Raises:
            FileNotFoundException: If the file does not exist
            NotContentOwnerException: If the caller is neither the uploader
                nor a moderator
        """
        file_repo = FileRepository(db)
        library_file = file_repo.get_by_id(file_id)
        if library_file is None:
            raise FileNotFoundException()
        if not user.is_moderator and library_file.uploader_id != user.id:
            raise NotContentOwnerException()

        storage_key = library_file.storage_key
        file_repo.delete(library_file)
        FileService.remove_stored_file(storage_key)
        logger.info(f"File {file_id} deleted by user {user.id}")
