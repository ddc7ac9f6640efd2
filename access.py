"""
Subject entitlement lookup used as the generation precondition.
"""
from typing import Optional

from sqlalchemy.orm import Session

from database import Chapter, SubjectAccess, UserRole


def is_admin(db: Session, user_id: str) -> bool:
    role = db.get(UserRole, user_id)
    return role is not None and role.role == "admin"


def check_chapter_access(db: Session, user_id: Optional[str], chapter_id: int) -> bool:
    """
    True when the user may work with the chapter: admins always, students
    with an active grant on the chapter's subject.
    """
    if not user_id:
        return False
    chapter = db.get(Chapter, chapter_id)
    if chapter is None:
        return False
    if is_admin(db, user_id):
        return True

    grant = db.query(SubjectAccess).filter(
        SubjectAccess.student_id == user_id,
        SubjectAccess.subject_id == chapter.subject_id,
        SubjectAccess.active.is_(True),
    ).first()
    return grant is not None
