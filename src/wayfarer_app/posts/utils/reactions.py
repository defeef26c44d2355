from typing import Dict, List, Optional, Tuple
from uuid import UUID
from wayfarer_app.core.base.base import utc_now
from wayfarer_app.posts.models.post_models import Reaction, ReactionType


def toggle_reaction(
    reactions: List[Reaction], user_id: UUID, reaction_type: ReactionType
) -> Tuple[List[Reaction], Optional[ReactionType]]:
    """
    Apply one user's reaction click to a reaction list.

    Same type as before removes it, a different type replaces it, and no
    prior reaction adds one. Returns the new list and the user's resulting
    reaction (None when removed). The list never holds two entries for
    the same user.
    """
    existing = next((r for r in reactions if r.user_id == user_id), None)
    others = [r for r in reactions if r.user_id != user_id]

    if existing is None:
        return others + [Reaction(user_id=user_id, reaction_type=reaction_type)], reaction_type

    if existing.reaction_type == reaction_type:
        return others, None

    replaced = existing.model_copy(update={"reaction_type": reaction_type, "updated_at": utc_now()})
    return others + [replaced], reaction_type


def count_reactions(reactions: List[Reaction]) -> Dict[str, int]:
    counts = {t.value: 0 for t in ReactionType}
    for reaction in reactions:
        counts[ReactionType(reaction.reaction_type).value] += 1
    return counts
