from fastapi import APIRouter

from app.api.v1.endpoints import projects, staff, tasks, trees

api_router = APIRouter()

api_router.include_router(projects.router)
api_router.include_router(trees.router)
api_router.include_router(tasks.router)
api_router.include_router(staff.router)
