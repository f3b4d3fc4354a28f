"""Users collaborator: skill profiles read by the scheduler and recommendation engine."""

import logging
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import sessionmaker

from jobsforce.models import User
from jobsforce.utils.text_processing import unique_skills

logger = logging.getLogger("jobsforce.storage.users")


class UserDirectory:
    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def get(self, user_id: int) -> Optional[User]:
        with self.session_factory() as db:
            return db.get(User, user_id)

    def create(self, email: str, name: str = "", skills: Optional[list[str]] = None) -> User:
        user = User(email=email.strip().lower(), name=name, skills=list(skills or []))
        with self.session_factory() as db:
            db.add(user)
            db.commit()
        logger.info("Created user %d (%s) with %d skills", user.id, user.email, len(user.skills))
        return user

    def update_skills(self, user_id: int, skills: list[str]) -> Optional[User]:
        with self.session_factory() as db:
            user = db.get(User, user_id)
            if user is None:
                return None
            user.skills = list(skills)
            db.commit()
        logger.info("[user:%d] Skills updated (%d skills)", user_id, len(skills))
        return user

    def skill_lists(self) -> list[list[str]]:
        """Skill list of every user that has at least one skill, oldest user first."""
        with self.session_factory() as db:
            rows = db.query(User.skills).order_by(User.id).all()
        return [list(skills) for (skills,) in rows if skills]

    def all_skills(self) -> list[str]:
        """Union of all user skills, first-seen order."""
        return unique_skills(self.skill_lists())

    def count(self) -> int:
        with self.session_factory() as db:
            return db.query(func.count(User.id)).scalar() or 0
