from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.deps import get_db
from app.schemas.project import StaffCreate, StaffRead
from app.services import project_service

router = APIRouter(prefix="/staff", tags=["staff"])


@router.get("", response_model=list[StaffRead])
async def list_staff(
    include_inactive: bool = Query(default=False), db: AsyncSession = Depends(get_db)
):
    return await project_service.list_staff(db, include_inactive)


@router.post("", response_model=StaffRead, status_code=status.HTTP_201_CREATED)
async def create_staff(data: StaffCreate, db: AsyncSession = Depends(get_db)):
    if await project_service.get_staff_by_name(db, data.full_name):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Staff member already exists")
    return await project_service.create_staff(db, data)
