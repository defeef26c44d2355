import logging
from datetime import datetime
from typing import Optional
from wayfarer_app.core.base.base import utc_now
from wayfarer_app.users.models.user_models import UserModel

logger = logging.getLogger(__name__)


async def auto_unban_users(now: Optional[datetime] = None) -> int:
    """
    Lift every ban whose `ban_until` has passed.

    Each user is saved on its own; a failure is logged and the sweep moves on
    to the next user. Returns how many users were unbanned.
    """
    now = now or utc_now()
    expired = await UserModel.find(
        {"is_banned": True, "ban_until": {"$lte": now}}
    ).to_list()

    unbanned = 0
    for user in expired:
        try:
            user.is_banned = False
            user.ban_until = None
            await user.save()
            unbanned += 1
        except Exception as e:
            logger.error(f"Failed to unban user {user.id}: {e}", exc_info=True)

    logger.info(f"Ban sweep finished: {unbanned} of {len(expired)} users unbanned")
    return unbanned
