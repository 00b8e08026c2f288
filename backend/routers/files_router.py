"""School library: shared documents."""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from repositories.database import get_db
from services.file_service import FileService

router = APIRouter(prefix="/files", tags=["files"])


@router.get("", response_model=List[schemas.LibraryFile])
async def list_files(
    subject: Optional[str] = Query(default=None, max_length=100),
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> List[db_models.LibraryFile]:
    """Approved library files, newest first."""
    return FileService.list_files(db, subject)


@router.post(
    "", response_model=schemas.LibraryFile, status_code=status.HTTP_201_CREATED
)
def upload_file(
    file: UploadFile = File(...),
    subject: Optional[str] = Form(default=None),
    description: Optional[str] = Form(default=None),
    visibility: db_models.FileVisibility = Form(default=db_models.FileVisibility.PUBLIC),
    group_id: Optional[int] = Form(default=None),
    current_user: db_models.User = Depends(auth.get_verified_user),
    db: Session = Depends(get_db),
) -> db_models.LibraryFile:
    """
    Upload a PDF, Word document or image to the library.

    Domain exceptions are caught by centralized exception handlers.
    """
    return FileService.upload_file(
        db, current_user, file, subject, description, visibility, group_id
    )


@router.get("/{file_id}/download")
def download_file(
    file_id: int,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> FileResponse:
    """Download a file and count the download."""
    library_file, path = FileService.get_download(db, file_id, current_user)
    return FileResponse(path, filename=library_file.file_name)


@router.delete("/{file_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_file(
    file_id: int,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> Response:
    """Delete a file. The uploader, teachers and admins may do this."""
    FileService.delete_file(db, file_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
