from typing import List
from fastapi import APIRouter, Depends, HTTPException, Response, status

from app.api.deps import get_user_service
from app.api.users.schemas import UserResponse, UserUpsert
from app.domain.users.service import UserService

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", response_model=List[UserResponse], status_code=status.HTTP_200_OK)
async def get_all_users(service: UserService = Depends(get_user_service)):
    users = await service.get_all_users()
    return [UserResponse.model_validate(user) for user in users]


@router.get("/{user_id}", response_model=UserResponse, status_code=status.HTTP_200_OK)
async def get_user(user_id: int, service: UserService = Depends(get_user_service)):
    user = await service.get_user_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserResponse.model_validate(user)


@router.put("/{user_id}", response_model=UserResponse, status_code=status.HTTP_200_OK)
async def upsert_user(
    user_id: int,
    user_details: UserUpsert,
    service: UserService = Depends(get_user_service),
):
    user = await service.upsert_user(user_id, user_details)
    return UserResponse.model_validate(user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: int, service: UserService = Depends(get_user_service)):
    if not await service.delete_user(user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
