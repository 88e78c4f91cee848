from conftest import ALICE, SECRETARY, headers


def test_facilities_are_listed_alphabetically(client, society):
    for name in ("Swimming Pool", "Clubhouse", "Gym"):
        response = client.post(
            f"/societies/{society}/facilities", headers=headers(SECRETARY), json={"name": name}
        )
        assert response.status_code == 201

    facilities = client.get(f"/societies/{society}/facilities", headers=headers(ALICE)).json()
    assert [f["name"] for f in facilities] == ["Clubhouse", "Gym", "Swimming Pool"]
    assert all(f["description"] is None for f in facilities)


def test_empty_name_is_rejected_and_nothing_written(client, society):
    for name in ("", "   "):
        response = client.post(
            f"/societies/{society}/facilities", headers=headers(SECRETARY), json={"name": name}
        )
        assert response.status_code == 422
        assert response.json()["detail"] == "Name is required"

    facilities = client.get(f"/societies/{society}/facilities", headers=headers(SECRETARY)).json()
    assert facilities == []


def test_residents_cannot_add_facilities(client, society):
    response = client.post(
        f"/societies/{society}/facilities", headers=headers(ALICE), json={"name": "Tennis Court"}
    )
    assert response.status_code == 403


def test_unknown_society_is_not_found(client):
    response = client.get("/societies/missing/facilities", headers=headers(ALICE))
    assert response.status_code == 404


def test_missing_identity_header_is_rejected(client, society):
    response = client.get(f"/societies/{society}/facilities")
    assert response.status_code == 422
