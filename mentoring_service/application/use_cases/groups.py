import structlog

from ..dto import GroupChanges
from ..ports import IGroupRepository, IUserRepository
from ...domain.entities import Membership
from ...domain.enums import GroupCategory
from ...domain.errors import Conflict, NotFound

logger = structlog.get_logger()


class GroupMembershipResolver:
    """Определяет группу пользователя как ментии и как ментора (0 или 1 каждая)."""

    def __init__(self, groups: IGroupRepository):
        self.groups = groups

    def mentee_group_id(self, user) -> int | None:
        return user.mentee_group_id

    def owned_group(self, user):
        return self.groups.get_by_mentor(user.id)

    def resolve(self, user) -> Membership:
        owned = self.owned_group(user)
        return Membership(
            mentee_group_id=self.mentee_group_id(user),
            owned_group_id=owned.id if owned else None,
        )


class ListGroups:
    def __init__(self, groups: IGroupRepository):
        self.groups = groups

    def execute(self) -> list:
        return self.groups.list_all()


class CreateGroup:
    def __init__(self, groups: IGroupRepository):
        self.groups = groups

    def execute(self, category: str = GroupCategory.CS_BSC_MENG.value):
        group = self.groups.create(category=category)
        logger.info("group_created", group_id=group.id, group_number=group.group_number)
        return group


class UpdateGroup:
    def __init__(self, groups: IGroupRepository, users: IUserRepository):
        self.groups = groups
        self.users = users

    def execute(self, group_id: int, changes: GroupChanges):
        group = self.groups.get(group_id)
        if not group:
            raise NotFound("group not found")

        fields = {}
        if changes.category is not None:
            fields["category"] = changes.category
        if changes.info is not None:
            fields["info"] = changes.info
        if changes.set_mentor:
            if changes.mentor_id is not None:
                if not self.users.get(changes.mentor_id):
                    raise NotFound("mentor not found")
                owned = self.groups.get_by_mentor(changes.mentor_id)
                if owned and owned.id != group.id:
                    raise Conflict("mentor already assigned to another group")
            fields["mentor_id"] = changes.mentor_id

        mentee_ids = list(dict.fromkeys(changes.mentee_ids))
        mentees = self.users.get_many(mentee_ids)
        if len(mentees) != len(mentee_ids):
            found = {u.id for u in mentees}
            missing = [i for i in mentee_ids if i not in found]
            raise NotFound(f"users not found: {missing}")
        # ментии не может состоять в двух группах: переносить молча нельзя
        taken = [u.id for u in mentees if u.mentee_group_id not in (None, group.id)]
        if taken:
            raise Conflict(f"users already mentees of another group: {taken}")

        group = self.groups.update(group, fields, mentees=mentees)
        logger.info(
            "group_updated",
            group_id=group.id,
            mentor_id=group.mentor_id,
            mentee_count=len(group.mentees),
        )
        return group


class DeleteGroup:
    def __init__(self, groups: IGroupRepository):
        self.groups = groups

    def execute(self, group_id: int) -> None:
        group = self.groups.get(group_id)
        if not group:
            raise NotFound("group not found")
        if self.groups.has_sessions(group.id):
            raise Conflict("group still has sessions")
        self.groups.delete(group)
        logger.info("group_deleted", group_id=group_id)
