"""Domain models shared by the workflows and the HTTP layer."""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

TOTAL_JUZ = 30


class Role(str, Enum):
    STUDENT = "siswa"
    TEACHER = "guru"
    PARENT = "ortu"
    ADMIN = "admin"


class UserType(str, Enum):
    NORMAL = "normal"
    CADEL = "cadel"
    SCHOOL = "school"
    PERSONAL = "personal"


class SetoranCategory(str, Enum):
    MEMORIZATION = "hafalan"
    REVISION = "murojaah"


class SetoranStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "diterima"
    REJECTED = "ditolak"
    COMPLETED = "selesai"


class _Record(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class User(_Record):
    id: str
    email: str
    name: str
    role: Role
    type: Optional[UserType] = None
    organize_id: Optional[str] = None
    created_at: Optional[datetime] = None


class Organize(_Record):
    id: str
    name: str
    description: Optional[str] = None
    guru_id: str
    created_at: Optional[datetime] = None


class Setoran(_Record):
    id: str
    siswa_id: str
    guru_id: str
    organize_id: str
    file_url: str
    jenis: SetoranCategory
    tanggal: date
    status: SetoranStatus = SetoranStatus.PENDING
    catatan: Optional[str] = None
    surah: Optional[str] = None
    juz: Optional[int] = Field(default=None, ge=1, le=TOTAL_JUZ)
    poin: int = 0
    created_at: Optional[datetime] = None
    reviewed_at: Optional[datetime] = None


class Quiz(_Record):
    id: str
    question: str
    options: List[str] = Field(default_factory=list)
    correct_option: str
    poin: int = Field(default=0, ge=0)
    organize_id: str
    created_at: Optional[datetime] = None


class QuizAnswer(_Record):
    id: str
    quiz_id: str
    siswa_id: str
    selected_option: str
    is_correct: bool
    poin: int = 0
    answered_at: Optional[datetime] = None


class PointBalance(BaseModel):
    siswa_id: str
    total_poin: int = 0
    updated_at: Optional[datetime] = None
    exists: bool = False


class CompletionLabel(_Record):
    id: str
    siswa_id: str
    juz: int = Field(ge=1, le=TOTAL_JUZ)
    tanggal: date
    diberikan_oleh: str
    created_at: Optional[datetime] = None


__all__ = [
    "CompletionLabel",
    "Organize",
    "PointBalance",
    "Quiz",
    "QuizAnswer",
    "Role",
    "Setoran",
    "SetoranCategory",
    "SetoranStatus",
    "TOTAL_JUZ",
    "User",
    "UserType",
]
