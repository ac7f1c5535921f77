from fastapi import APIRouter

from .students import students_router

staff_router = APIRouter()

# Include sub-routers
staff_router.include_router(
    students_router, prefix="/students", tags=["Staff - Student Credentials"]
)
