from fastapi import APIRouter, Depends
from pydantic import BaseModel
from typing import List

from app.api.deps import get_current_user, get_relay
from app.realtime.relay import NotificationRelay

router = APIRouter()


class OnlineUsersResponse(BaseModel):
    count: int
    user_ids: List[str]


class UserPresenceResponse(BaseModel):
    user_id: str
    online: bool


@router.get("/online", response_model=OnlineUsersResponse)
async def list_online_users(
    current_user: dict = Depends(get_current_user),
    relay: NotificationRelay = Depends(get_relay),
):
    """Snapshot of users with at least one live socket"""
    return OnlineUsersResponse(
        count=relay.online_count(),
        user_ids=relay.online_user_ids(),
    )


@router.get("/online/{user_id}", response_model=UserPresenceResponse)
async def get_user_presence(
    user_id: str,
    current_user: dict = Depends(get_current_user),
    relay: NotificationRelay = Depends(get_relay),
):
    return UserPresenceResponse(user_id=user_id, online=relay.is_user_online(user_id))
