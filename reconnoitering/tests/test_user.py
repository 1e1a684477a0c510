from __future__ import annotations

from conftest import USER_EMAIL, USER_PASSWORD, login


# ── Profile ──────────────────────────────────────────────────────────────


def test_profile(client, user):
    login(client)
    data = client.get("/user/profile").json()["data"]
    assert data["email"] == USER_EMAIL
    assert data["name"] == "Test User"
    assert data["favoriteCount"] == 0


def test_update_profile_refreshes_session(client, user):
    login(client)
    resp = client.put("/user/profile", json={"name": "  Renamed  "})
    assert resp.status_code == 200
    assert resp.json()["data"]["name"] == "Renamed"
    assert client.get("/auth/me").json()["data"]["name"] == "Renamed"


def test_blank_profile_name_is_rejected(client, user, db):
    login(client)
    resp = client.put("/user/profile", json={"name": "   "})
    assert resp.status_code == 400
    assert resp.json()["errors"][0]["field"] == "name"
    assert db.users.get(user["id"])["name"] == "Test User"


def test_change_password(client, user):
    login(client)
    resp = client.put("/user/password", json={"currentPassword": USER_PASSWORD, "newPassword": "Changed99"})
    assert resp.status_code == 200
    client.post("/auth/logout")
    login(client, USER_EMAIL, "Changed99")


def test_change_password_wrong_current(client, user):
    login(client)
    resp = client.put("/user/password", json={"currentPassword": "Nope12345", "newPassword": "Changed99"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Current password is incorrect"


# ── Preferences ──────────────────────────────────────────────────────────


def test_default_preferences(client, user):
    login(client)
    data = client.get("/user/preferences").json()["data"]
    assert data == {
        "preferredTags": [],
        "preferredArtists": [],
        "preferredLocations": [],
        "notificationFrequency": "weekly",
    }


def test_update_preferences_partially(client, user):
    login(client)
    client.put("/user/preferences", json={"preferredTags": ["dutch", " dutch ", "", "modern"]})
    data = client.put("/user/preferences", json={"notificationFrequency": "monthly"}).json()["data"]
    assert data["preferredTags"] == ["dutch", "modern"]
    assert data["notificationFrequency"] == "monthly"


def test_invalid_notification_frequency(client, user):
    login(client)
    resp = client.put("/user/preferences", json={"notificationFrequency": "hourly"})
    assert resp.status_code == 400


# ── Favorites ────────────────────────────────────────────────────────────


def test_add_and_list_favorites(client, user, catalogue):
    login(client)
    monet, paris = catalogue["monet"]["id"], catalogue["paris"]["id"]
    client.post(f"/user/favorites/{paris}")
    resp = client.post(f"/user/favorites/{monet}")
    assert resp.json()["data"] == {"favoriteExhibitions": [paris, monet], "isFavorite": True}

    body = client.get("/user/favorites").json()
    assert [item["title"] for item in body["data"]] == ["Paris Photo", "Monet in Oslo"]
    assert body["data"][1]["venue"]["name"] == "Nasjonalmuseet"
    assert body["meta"]["total"] == 2


def test_favorite_twice_keeps_one_entry(client, db, user, catalogue):
    login(client)
    monet = catalogue["monet"]["id"]
    client.post(f"/user/favorites/{monet}")
    client.post(f"/user/favorites/{monet}")
    assert db.users.get(user["id"])["favoriteExhibitions"] == [monet]


def test_remove_favorite(client, user, catalogue):
    login(client)
    monet = catalogue["monet"]["id"]
    client.post(f"/user/favorites/{monet}")
    resp = client.delete(f"/user/favorites/{monet}")
    assert resp.json()["data"] == {"favoriteExhibitions": [], "isFavorite": False}
    # removing again is harmless
    assert client.delete(f"/user/favorites/{monet}").status_code == 200


def test_favorite_unknown_exhibition(client, user):
    login(client)
    assert client.post("/user/favorites/" + "b" * 24).status_code == 404
    assert client.post("/user/favorites/nope").status_code == 400


def test_deleted_exhibition_drops_out_of_favorites(client, db, user, catalogue):
    login(client)
    monet = catalogue["monet"]["id"]
    client.post(f"/user/favorites/{monet}")
    db.exhibitions.delete(monet)
    assert client.get("/user/favorites").json()["data"] == []
