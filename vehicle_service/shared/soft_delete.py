"""Deactivate-if-referenced deletion shared by catalog and staff records"""

import logging

from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


def delete_or_deactivate(db: Session, instance, reference_column) -> bool:
    """
    Remove ``instance`` unless rows still point at it through ``reference_column``.

    Referenced rows are kept and marked inactive so historical appointments
    still resolve.

    Returns:
        True when the row was soft-deleted, False when it was removed
    """
    is_referenced = (
        db.query(reference_column).filter(reference_column == instance.id).first() is not None
    )
    label = f"{type(instance).__name__} {instance.id}"

    if is_referenced:
        instance.is_active = False
        db.commit()
        logger.info(f"🗃️ {label} is referenced, deactivated instead of deleted")
        return True

    db.delete(instance)
    db.commit()
    logger.info(f"🗑️ {label} deleted")
    return False
