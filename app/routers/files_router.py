# /markhub-backend/app/routers/files_router.py

"""
Serves blobs behind signed download links. The token in the URL is the only
credential: it names one path and expires a few minutes after issue.
"""

import logging
import mimetypes
import os

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import FileResponse

from ..core import security
from ..services.storage_service import BlobStore, BlobStoreError, get_blob_store

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/{token}", response_class=FileResponse, summary="Download a File via Signed Link")
def download_file(token: str, blobs: BlobStore = Depends(get_blob_store)):
    try:
        path = security.decode_download_token(token)
    except security.TokenError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))

    try:
        full_path = blobs.open_path(path)
    except BlobStoreError as e:
        logger.warning("Signed link for missing blob %s: %s", path, e)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found.")

    filename = os.path.basename(path)
    media_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"
    return FileResponse(full_path, media_type=media_type, filename=filename)
