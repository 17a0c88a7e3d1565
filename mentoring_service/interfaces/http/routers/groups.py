from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ....application.dto import GroupChanges
from ....application.use_cases.groups import CreateGroup, DeleteGroup, ListGroups, UpdateGroup
from ....infrastructure.cache import GROUPS_LIST_KEY, get_cache, invalidate, set_cache
from ....infrastructure.db import get_db
from ....infrastructure.metrics import cache_hits_total, cache_misses_total
from ....infrastructure.repositories import GroupRepository, UserRepository
from ..authz import require_admin
from ..schemas import GroupCreate, GroupOut, GroupUpdate

router = APIRouter(prefix="/api/admin/groups", tags=["groups"],
                   dependencies=[Depends(require_admin)])


@router.get("", response_model=list[GroupOut])
def list_groups(db: Session = Depends(get_db)):
    cached = get_cache(GROUPS_LIST_KEY)
    if cached is not None:
        cache_hits_total.inc()
        return cached

    cache_misses_total.inc()
    rows = ListGroups(GroupRepository(db)).execute()
    result = [GroupOut.model_validate(row) for row in rows]
    set_cache(GROUPS_LIST_KEY, [r.model_dump(mode="json") for r in result])
    return result


@router.post("", response_model=GroupOut, status_code=status.HTTP_201_CREATED)
def create_group(payload: GroupCreate | None = None, db: Session = Depends(get_db)):
    category = (payload or GroupCreate()).category
    row = CreateGroup(GroupRepository(db)).execute(category=category.value)
    invalidate(GROUPS_LIST_KEY)
    return row


@router.put("/{group_id}", response_model=GroupOut)
def update_group(group_id: int, payload: GroupUpdate, db: Session = Depends(get_db)):
    changes = GroupChanges(
        mentee_ids=payload.mentee_ids,
        category=payload.category.value if payload.category else None,
        info=payload.info,
        mentor_id=payload.mentor_id,
        # явный null снимает ментора, отсутствие поля - не трогает
        set_mentor="mentor_id" in payload.model_fields_set,
    )
    row = UpdateGroup(GroupRepository(db), UserRepository(db)).execute(group_id, changes)
    invalidate(GROUPS_LIST_KEY)
    return row


@router.delete("/{group_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_group(group_id: int, db: Session = Depends(get_db)):
    DeleteGroup(GroupRepository(db)).execute(group_id)
    invalidate(GROUPS_LIST_KEY)
