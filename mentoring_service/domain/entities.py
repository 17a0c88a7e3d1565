from dataclasses import dataclass


@dataclass(frozen=True)
class User:
    id: int
    role: str
    mentee_group_id: int | None = None


@dataclass(frozen=True)
class MentoringSession:
    id: int
    mentor_id: int
    group_id: int
    is_public: bool = False
    max_capacity: int | None = None


@dataclass(frozen=True)
class Membership:
    """Группа, где пользователь ментии, и группа, которую он ведёт (обе опциональны)."""
    mentee_group_id: int | None = None
    owned_group_id: int | None = None
