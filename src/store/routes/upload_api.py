# src/store/routes/upload_api.py
import logging

from fastapi import APIRouter, Depends, File, Form, UploadFile

from src.store.models.user import User
from src.store.utils.auth import get_admin_user
from src.store.utils.image_host import upload_signed

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/upload", tags=["Upload"])


@router.post("")
async def api_upload_image(
    file: UploadFile = File(...),
    folder: str = Form("uploads"),
    current_user: User = Depends(get_admin_user),
):
    data = await file.read()
    result = await upload_signed(data, file.content_type, folder=folder)
    logger.info("%s uploaded %s as %s", current_user.email, file.filename, result.public_id)
    return {"url": result.secure_url, "public_id": result.public_id}
