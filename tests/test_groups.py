import json
from unittest.mock import MagicMock, patch

from mentoring_service.infrastructure.models import UserORM

URL = "/api/admin/groups"


def test_list_groups(client, make_user, make_group, auth):
    """Тест списка групп с ментором и ментии"""
    admin = make_user("ADMIN")
    mentor = make_user("MENTOR")
    a = make_user()
    make_group(mentor=mentor, mentees=[a])
    make_group(category="CS_MATHS_MENG")

    response = client.get(URL, headers=auth(admin))
    assert response.status_code == 200
    groups = response.json()
    assert [g["group_number"] for g in groups] == [1, 2]
    assert groups[0]["mentor"]["id"] == mentor.id
    assert [m["id"] for m in groups[0]["mentees"]] == [a.id]
    assert groups[1]["mentor"] is None
    assert groups[1]["category"] == "CS_MATHS_MENG"


def test_list_groups_served_from_cache(client, make_user, auth):
    cached = [{"id": 7, "group_number": 7, "category": "CS_BSC_MENG", "mentees": []}]
    with patch("mentoring_service.infrastructure.cache.get_redis") as mock_redis:
        mock_client = MagicMock()
        mock_client.get.return_value = json.dumps(cached)
        mock_redis.return_value = mock_client
        response = client.get(URL, headers=auth(make_user("ADMIN")))
    assert response.status_code == 200
    assert response.json()[0]["group_number"] == 7
    mock_client.get.assert_called_once_with("groups:list")


def test_admin_roles_only(client, make_user, auth):
    """Тест: студенту и ментору раздел администрирования закрыт"""
    for role in ("STUDENT", "MENTOR"):
        assert client.get(URL, headers=auth(make_user(role))).status_code == 403
    for role in ("ADMIN", "SENIOR_MENTOR", "SUPERADMIN"):
        assert client.get(URL, headers=auth(make_user(role))).status_code == 200
    assert client.get(URL).status_code == 401


def test_create_group_numbering(client, make_user, make_group, auth):
    admin = make_user("ADMIN")
    make_group()
    make_group()

    response = client.post(URL, headers=auth(admin))
    assert response.status_code == 201
    body = response.json()
    assert body["group_number"] == 3
    assert body["category"] == "CS_BSC_MENG"
    assert body["mentor"] is None
    assert body["mentees"] == []

    response = client.post(URL, json={"category": "CS_MATHS_MENG"}, headers=auth(admin))
    assert response.json()["group_number"] == 4
    assert response.json()["category"] == "CS_MATHS_MENG"


def test_create_group_invalid_category(client, make_user, auth):
    response = client.post(URL, json={"category": "HISTORY"}, headers=auth(make_user("ADMIN")))
    assert response.status_code == 422


def test_update_group_replaces_mentees(client, db, make_user, make_group, auth):
    """Тест: состав ментии заменяется целиком"""
    admin = make_user("ADMIN")
    mentor = make_user("MENTOR")
    a, b, c = make_user(), make_user(), make_user()
    group = make_group(mentees=[a, b])

    response = client.put(
        f"{URL}/{group.id}",
        json={"mentee_ids": [b.id, c.id], "mentor_id": mentor.id, "info": "Room 101"},
        headers=auth(admin),
    )
    assert response.status_code == 200
    body = response.json()
    assert sorted(m["id"] for m in body["mentees"]) == [b.id, c.id]
    assert body["mentor_id"] == mentor.id
    assert body["info"] == "Room 101"

    db.expire_all()
    assert db.get(UserORM, a.id).mentee_group_id is None
    assert db.get(UserORM, c.id).mentee_group_id == group.id


def test_update_group_keeps_mentor_when_omitted(client, make_user, make_group, auth):
    admin = make_user("ADMIN")
    mentor = make_user("MENTOR")
    group = make_group(mentor=mentor)

    response = client.put(f"{URL}/{group.id}", json={"mentee_ids": []}, headers=auth(admin))
    assert response.json()["mentor_id"] == mentor.id

    response = client.put(f"{URL}/{group.id}", json={"mentee_ids": [], "mentor_id": None},
                          headers=auth(admin))
    assert response.status_code == 200
    assert response.json()["mentor_id"] is None


def test_update_group_mentor_taken(client, make_user, make_group, auth):
    """Тест: ментор ведёт не больше одной группы"""
    admin = make_user("ADMIN")
    mentor = make_user("MENTOR")
    make_group(mentor=mentor)
    other = make_group()

    response = client.put(f"{URL}/{other.id}", json={"mentee_ids": [], "mentor_id": mentor.id},
                          headers=auth(admin))
    assert response.status_code == 409


def test_update_group_mentee_in_other_group(client, make_user, make_group, auth):
    admin = make_user("ADMIN")
    a = make_user()
    make_group(mentees=[a])
    other = make_group()

    response = client.put(f"{URL}/{other.id}", json={"mentee_ids": [a.id]}, headers=auth(admin))
    assert response.status_code == 409


def test_update_group_unknown_ids(client, make_user, make_group, auth):
    admin = make_user("ADMIN")
    group = make_group()

    assert client.put(f"{URL}/{group.id}", json={"mentee_ids": [999]},
                      headers=auth(admin)).status_code == 404
    assert client.put(f"{URL}/{group.id}", json={"mentee_ids": [], "mentor_id": 999},
                      headers=auth(admin)).status_code == 404
    assert client.put(f"{URL}/999", json={"mentee_ids": []},
                      headers=auth(admin)).status_code == 404


def test_delete_group_releases_mentees(client, db, make_user, make_group, auth):
    admin = make_user("ADMIN")
    a = make_user()
    group_id = make_group(mentees=[a]).id
    a_id = a.id

    assert client.delete(f"{URL}/{group_id}", headers=auth(admin)).status_code == 204
    db.expire_all()
    assert db.get(UserORM, a_id).mentee_group_id is None
    assert client.delete(f"{URL}/{group_id}", headers=auth(admin)).status_code == 404


def test_delete_group_with_sessions(client, make_user, make_group, auth, future):
    """Тест: группу с сессиями удалить нельзя"""
    admin = make_user("ADMIN")
    mentor = make_user("MENTOR")
    group = make_group(mentor=mentor)
    created = client.post("/api/sessions", json={"title": "S", "date": future(), "location": "L"},
                          headers=auth(mentor))
    assert created.status_code == 201

    assert client.delete(f"{URL}/{group.id}", headers=auth(admin)).status_code == 409
