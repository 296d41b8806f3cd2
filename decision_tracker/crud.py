"""User-scoped data access.

Every query filters on ``user_id`` so a row owned by someone else is
indistinguishable from a missing one.
"""

import logging

from sqlalchemy.orm import Session, selectinload

from decision_tracker.database import Decision, DecisionItem, Profile

logger = logging.getLogger(__name__)


def get_profile(db: Session, user_id: str):
    return db.query(Profile).filter(Profile.user_id == user_id).first()


def ensure_profile(db: Session, user_id: str, display_name=None):
    """Provision the profile for a newly registered user, once."""
    profile = get_profile(db, user_id)
    if profile is not None:
        return profile
    profile = Profile(user_id=user_id, display_name=display_name)
    db.add(profile)
    db.commit()
    db.refresh(profile)
    logger.info("Created profile for user %s", user_id)
    return profile


def update_profile(db: Session, user_id: str, display_name):
    profile = get_profile(db, user_id)
    if profile is None:
        return None
    profile.display_name = display_name
    db.commit()
    db.refresh(profile)
    return profile


def list_decisions(db: Session, user_id: str):
    return (
        db.query(Decision)
        .options(selectinload(Decision.items))
        .filter(Decision.user_id == user_id)
        .order_by(Decision.created_at.desc())
        .all()
    )


def get_decision(db: Session, user_id: str, decision_id: str):
    return (
        db.query(Decision)
        .filter(Decision.id == decision_id, Decision.user_id == user_id)
        .first()
    )


def create_decision(db: Session, user_id: str, title: str, description=None):
    decision = Decision(user_id=user_id, title=title, description=description)
    db.add(decision)
    db.commit()
    db.refresh(decision)
    return decision


def update_decision(db: Session, user_id: str, decision_id: str, changes: dict):
    decision = get_decision(db, user_id, decision_id)
    if decision is None:
        return None
    for field, value in changes.items():
        setattr(decision, field, value)
    db.commit()
    db.refresh(decision)
    return decision


def delete_decision(db: Session, user_id: str, decision_id: str) -> bool:
    decision = get_decision(db, user_id, decision_id)
    if decision is None:
        return False
    db.delete(decision)
    db.commit()
    return True


def add_item(db: Session, decision, content: str, item_type: str):
    item = DecisionItem(
        decision_id=decision.id,
        user_id=decision.user_id,
        content=content,
        type=item_type,
    )
    db.add(item)
    db.commit()
    db.refresh(item)
    return item


def add_items(db: Session, decision, pros, cons):
    """Insert generated pros and cons in a single transaction.

    Either every item is stored or, on any failure, none of them are.
    """
    items = [
        DecisionItem(
            decision_id=decision.id,
            user_id=decision.user_id,
            content=content,
            type=item_type,
        )
        for item_type, contents in (("pro", pros), ("con", cons))
        for content in contents
    ]
    try:
        db.add_all(items)
        db.commit()
    except Exception:
        db.rollback()
        raise
    for item in items:
        db.refresh(item)
    return items


def delete_item(db: Session, user_id: str, item_id: str) -> bool:
    item = (
        db.query(DecisionItem)
        .filter(DecisionItem.id == item_id, DecisionItem.user_id == user_id)
        .first()
    )
    if item is None:
        return False
    db.delete(item)
    db.commit()
    return True
