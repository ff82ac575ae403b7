from fastapi import APIRouter
from dayflow.routers import attendance, employees, leave, leave_manager, profile

# Centralized API router hub; main.py only imports this one.
api_router = APIRouter()

api_router.include_router(leave.router, tags=["Leave"])
api_router.include_router(leave_manager.router, tags=["Leave Manager"])
api_router.include_router(attendance.router, tags=["Attendance"])
api_router.include_router(employees.router, tags=["Employees"])
api_router.include_router(profile.router, tags=["Profile"])
