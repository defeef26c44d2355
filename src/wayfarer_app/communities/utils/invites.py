import logging
from typing import Type, Union
from uuid import UUID
from fastapi import HTTPException
from wayfarer_app.core.base.base import BaseCollection, utc_now
from wayfarer_app.communities.models.community_models import (
    GroupInviteModel,
    EventInviteModel,
    InviteStatus,
)

logger = logging.getLogger(__name__)

Invite = Union[GroupInviteModel, EventInviteModel]


async def get_invite_for_recipient(model: Type[BaseCollection], invite_id: UUID, user_id: UUID) -> Invite:
    invite = await model.get(invite_id)
    if not invite:
        raise HTTPException(status_code=404, detail="Invite not found")
    if invite.to_user != user_id:
        raise HTTPException(status_code=403, detail="This invite is not addressed to you")
    if invite.status != InviteStatus.PENDING:
        raise HTTPException(status_code=409, detail=f"Invite is already {invite.status.value}")
    return invite


async def transition_invite(invite: Invite, to_status: InviteStatus):
    """
    Move a pending invite to `to_status`. The write is conditional on the
    invite still being pending, so of two concurrent answers only one wins
    and the other gets 409.
    """
    result = await type(invite).find_one(
        {"_id": invite.id, "status": InviteStatus.PENDING.value}
    ).update({"$set": {"status": to_status.value, "updated_at": utc_now()}})
    if result.modified_count == 0:
        raise HTTPException(status_code=409, detail="Invite has already been answered")
    invite.status = to_status


async def accept_into(
    invite: Invite,
    community_model: Type[BaseCollection],
    community_id: UUID,
    member_field: str,
    pending_field: str,
):
    """
    Accept an invite into a group or event.

    The invite has to win the pending -> accepted transition before the
    membership is touched, so an accept that loses to a decline (or to a
    second accept) leaves the community exactly as it was. The membership
    write is an idempotent $addToSet.
    """
    community = await community_model.find_one({"_id": community_id, "is_deleted": {"$ne": True}})
    if not community:
        raise HTTPException(status_code=404, detail="Community not found")

    await transition_invite(invite, InviteStatus.ACCEPTED)

    await community_model.find_one({"_id": community_id}).update(
        {
            "$addToSet": {member_field: invite.to_user},
            "$pull": {pending_field: invite.to_user},
            "$set": {"updated_at": utc_now()},
        }
    )
    logger.info(f"User {invite.to_user} accepted invite {invite.id}")
