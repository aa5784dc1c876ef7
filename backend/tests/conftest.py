from __future__ import annotations

from pathlib import Path
from typing import Iterator, Optional, Sequence

import pytest
from sqlalchemy.engine import Engine

from setoran.config import get_settings
from setoran.db.base import Base, new_id
from setoran.db.session import dispose_engine, get_engine, session_scope
from setoran.domain import Organize, Quiz, Role, User, UserType
from setoran.repositories import organizes, quizzes, users


class Seeder:
    """Creates rows directly through the repositories."""

    def user(
        self,
        role: Role,
        *,
        organize: Optional[Organize] = None,
        name: Optional[str] = None,
    ) -> User:
        user_id = new_id()
        with session_scope() as session:
            return users.create(
                session,
                user_id=user_id,
                email=f"{user_id}@example.com",
                name=name or f"{role.value}-{user_id[:8]}",
                role=role,
                user_type=UserType.NORMAL if role == Role.STUDENT else None,
                organize_id=organize.id if organize else None,
            )

    def organize(self, guru: User, name: str = "Kelas Al-Fatihah") -> Organize:
        with session_scope() as session:
            return organizes.create(session, name=name, guru_id=guru.id)

    def quiz(
        self,
        organize: Organize,
        *,
        question: str = "Berapa jumlah ayat surah Al-Fatihah?",
        options: Sequence[str] = ("5", "6", "7"),
        correct_option: str = "7",
        poin: int = 10,
    ) -> Quiz:
        with session_scope() as session:
            return quizzes.create(
                session,
                question=question,
                options=list(options),
                correct_option=correct_option,
                poin=poin,
                organize_id=organize.id,
            )

    def classroom(self) -> tuple[User, Organize, User]:
        """A teacher, their class and one student enrolled in it."""
        guru = self.user(Role.TEACHER, name="Ustadz Ahmad")
        organize = self.organize(guru)
        siswa = self.user(Role.STUDENT, organize=organize, name="Aisyah")
        return guru, organize, siswa


@pytest.fixture
def database(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Engine]:
    monkeypatch.setenv("SETORAN_DATABASE_URL", f"sqlite:///{tmp_path / 'setoran.db'}")
    get_settings.cache_clear()
    dispose_engine()
    engine = get_engine()
    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
    yield engine
    dispose_engine()
    get_settings.cache_clear()


@pytest.fixture
def seed(database: Engine) -> Seeder:
    return Seeder()
