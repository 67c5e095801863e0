from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from shared.background import BestEffortRunner, get_hooks
from shared.config.database import get_db
from shared.media import ObjectStore, get_object_store, read_image_upload
from shared.security import CurrentUser, Role, require_roles
from .schemas import TestimonyEnvelope, TestimonyResponse
from .service import TestimonyService

router = APIRouter()

admin_only = require_roles(Role.ADMIN)


@router.get("/", response_model=list[TestimonyResponse])
async def list_testimonies(db: AsyncSession = Depends(get_db)):
    return await TestimonyService.list_testimonies(db)


@router.post("/add", response_model=TestimonyEnvelope, status_code=status.HTTP_201_CREATED)
async def add_testimony(
    image: UploadFile | None = File(default=None),
    db: AsyncSession = Depends(get_db),
    store: ObjectStore = Depends(get_object_store),
    user: CurrentUser = Depends(admin_only),
):
    raw = await read_image_upload(image)
    testimony = await TestimonyService.add_testimony(db, store, raw)
    return TestimonyEnvelope(message="Testimony image uploaded successfully!", testimony=testimony)


@router.delete("/delete/{testimony_id}", response_model=TestimonyEnvelope)
async def delete_testimony(
    testimony_id: int,
    db: AsyncSession = Depends(get_db),
    store: ObjectStore = Depends(get_object_store),
    hooks: BestEffortRunner = Depends(get_hooks),
    user: CurrentUser = Depends(admin_only),
):
    await TestimonyService.delete_testimony(db, testimony_id, store, hooks)
    return TestimonyEnvelope(message="Testimony image deleted successfully!")
