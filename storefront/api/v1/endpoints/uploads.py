"""
Uploads API

``image`` takes one file, ``multipleImages`` up to UPLOAD_MAX_FILES. Files
are checked before anything is written; a rejected batch stores nothing.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, File, UploadFile, status

from storefront.api.deps import get_current_user, get_upload_service
from storefront.api.responses import json_response
from storefront.models.user import User
from storefront.services import UploadService
from storefront.validation import validate_image, validate_images

router = APIRouter()


@router.post("/image")
async def upload_image(
    image: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
    service: UploadService = Depends(get_upload_service)
):
    validate_image(image)
    return json_response(await service.save_files([image]), status.HTTP_201_CREATED)


@router.post("/images")
async def upload_images(
    multipleImages: Optional[List[UploadFile]] = File(None),
    current_user: User = Depends(get_current_user),
    service: UploadService = Depends(get_upload_service)
):
    files = validate_images(multipleImages)
    return json_response(await service.save_files(files), status.HTTP_201_CREATED)
