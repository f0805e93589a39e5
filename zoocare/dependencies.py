from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from zoocare.config import Settings
from zoocare.models import User
from zoocare.services.animals import AnimalRegistry
from zoocare.services.medical import MedicalRecordService
from zoocare.services.tasks import TaskManager
from zoocare.services.users import UserDirectory
from zoocare.services.vets import VetAssignmentService

bearer = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def animal_registry(request: Request) -> AnimalRegistry:
    return AnimalRegistry(request.app.state.database, request.app.state.now_fn)


def task_manager(request: Request) -> TaskManager:
    return TaskManager(request.app.state.database, request.app.state.now_fn)


def user_directory(request: Request) -> UserDirectory:
    return UserDirectory(request.app.state.database, request.app.state.now_fn)


def vet_assignments(request: Request) -> VetAssignmentService:
    return VetAssignmentService(request.app.state.database, request.app.state.now_fn)


def medical_records(request: Request) -> MedicalRecordService:
    return MedicalRecordService(request.app.state.database, request.app.state.now_fn)


def current_user(
    directory: Annotated[UserDirectory, Depends(user_directory)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer)],
) -> User:
    return directory.resolve_token(credentials.credentials if credentials else None)


CurrentUser = Annotated[User, Depends(current_user)]
