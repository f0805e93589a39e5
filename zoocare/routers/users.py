from typing import Annotated

from fastapi import APIRouter, Depends

from zoocare.dependencies import CurrentUser, user_directory
from zoocare.services.users import UserDirectory

router = APIRouter(prefix="/user")

Directory = Annotated[UserDirectory, Depends(user_directory)]


@router.get("/getAllVetsOnly")
async def all_vets(directory: Directory) -> dict:
    vets = directory.list_vets()
    return {
        "success": True,
        "count": len(vets),
        "users": [v.to_json() for v in vets],
    }


@router.get("/getAllUsersOnly")
async def all_regular_users(directory: Directory) -> dict:
    users = directory.list_regular_users()
    return {
        "success": True,
        "count": len(users),
        "users": [u.to_json() for u in users],
    }


@router.get("/countUsersOnly")
async def count_regular_users(directory: Directory) -> dict:
    return {"success": True, "count": directory.count_regular_users()}


@router.get("/profile")
async def profile(user: CurrentUser) -> dict:
    return {"success": True, "user": user.to_json()}


@router.get("/{user_id}")
async def get_user(user_id: str, directory: Directory) -> dict:
    return {"success": True, "user": directory.get(user_id).to_json()}
