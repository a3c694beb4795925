from datetime import timedelta

from app.core.auth_guard import create_access_token


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_protected_routes_need_a_token(client, make_user):
    make_user("mentee-e", learns=["go"])

    assert client.get("/api/me").status_code == 401
    assert client.get("/api/me", headers={"Authorization": "Bearer not-a-jwt"}).status_code == 401

    expired = create_access_token("mentee-e", expires_delta=timedelta(minutes=-1))
    assert client.get("/api/me", headers={"Authorization": f"Bearer {expired}"}).status_code == 401

    ghost = create_access_token("ghost")
    assert client.get("/api/me", headers={"Authorization": f"Bearer {ghost}"}).status_code == 401


def test_token_cookie_is_accepted(client, make_user):
    make_user("mentee-e", learns=["go"])
    client.cookies.set("access_token", create_access_token("mentee-e"))

    response = client.get("/api/me")

    assert response.status_code == 200
    assert response.json()["id"] == "mentee-e"


# ---------------------------------------------------------
# SKILLS
# ---------------------------------------------------------
def test_skill_catalog_and_projections(client, make_user):
    make_user("tutor", teaches=["go"])
    make_user("student", learns=["go", "rust"])

    catalog = client.get("/api/skills").json()
    assert [s["slug"] for s in catalog] == ["go", "python", "react", "rust"]

    skills = client.get("/api/users/student/skills").json()
    assert skills["mentor_skills"] == []
    assert [s["slug"] for s in skills["mentee_skills"]] == ["go", "rust"]

    assert [u["id"] for u in client.get("/api/skills/go/mentors").json()] == ["tutor"]
    assert [u["id"] for u in client.get("/api/skills/go/mentees").json()] == ["student"]


def test_unknown_skill_or_user_gives_empty_lists(client, skills):
    response = client.get("/api/skills/cobol/mentors")
    assert response.status_code == 200
    assert response.json() == []
    assert client.get("/api/skills/cobol/mentees").json() == []

    response = client.get("/api/users/ghost/skills")
    assert response.status_code == 200
    assert response.json() == {"user_id": "ghost", "mentor_skills": [], "mentee_skills": []}


# ---------------------------------------------------------
# ONBOARDING
# ---------------------------------------------------------
def test_onboarding_endpoints(client, make_user, auth_headers):
    user = make_user("newbie", onboarded=False)
    headers = auth_headers(user)

    assert client.get("/api/onboarding/next", headers=headers).json() == {"next_step": "/onboarding/interests"}

    premature = client.post("/api/onboarding/complete", headers=headers)
    assert premature.status_code == 409
    assert premature.json()["error"] == "invalid_state"

    unknown = client.put("/api/onboarding/skills", json={"mentor_skills": ["cobol"]}, headers=headers)
    assert unknown.status_code == 404

    response = client.put(
        "/api/onboarding/skills",
        json={"mentor_skills": ["python"], "mentee_skills": ["go"]},
        headers=headers,
    )
    assert response.status_code == 200
    assert [s["slug"] for s in response.json()["mentee_skills"]] == ["go"]

    response = client.patch(
        "/api/onboarding/profile",
        json={"location": "Lisbon", "availability": {"mon": [["09:00", "12:00"]]}},
        headers=headers,
    )
    assert response.json()["location"] == "Lisbon"

    cleared = client.patch("/api/onboarding/profile", json={"in_person": None}, headers=headers)
    assert cleared.status_code == 422
    assert client.get("/api/me", headers=headers).json()["in_person"] is False

    done = client.post("/api/onboarding/complete", headers=headers)
    assert done.status_code == 200
    assert done.json()["onboarding_completed_at"] is not None
    assert client.get("/api/onboarding/next", headers=headers).json() == {"next_step": "/dashboard"}


# ---------------------------------------------------------
# MATCHING -> MENTORSHIP
# ---------------------------------------------------------
def test_full_mentorship_flow(client, make_user, auth_headers):
    mentor = make_user("mentor-m", teaches=["go"])
    mentee = make_user("mentee-e", learns=["go"])
    outsider = make_user("outsider", learns=["go"])

    matches = client.get("/api/matches", headers=auth_headers(mentee)).json()
    assert [(m["candidate"]["id"], m["score"]) for m in matches] == [("mentor-m", 1.0)]
    assert matches[0]["shared_skills"] == ["go"]

    body = {"mentor_id": mentor.id, "mentee_id": mentee.id}
    created = client.post("/api/suggestions", json=body, headers=auth_headers(mentee))
    assert created.status_code == 201
    suggestion_id = created.json()["id"]
    assert created.json()["status"] == "PENDING"

    duplicate = client.post("/api/suggestions", json=body, headers=auth_headers(mentee))
    assert duplicate.status_code == 409
    assert duplicate.json()["error"] == "conflict"

    forbidden = client.post(
        f"/api/suggestions/{suggestion_id}/respond",
        json={"decision": "accept"},
        headers=auth_headers(outsider),
    )
    assert forbidden.status_code == 403

    accepted = client.post(
        f"/api/suggestions/{suggestion_id}/respond",
        json={"decision": "accept"},
        headers=auth_headers(mentee),
    )
    assert accepted.status_code == 200
    assert accepted.json()["status"] == "ACCEPTED"
    mentorship_id = accepted.json()["mentorship_id"]

    listed = client.get("/api/mentorships", headers=auth_headers(mentor)).json()
    assert [(m["id"], m["status"]) for m in listed] == [(mentorship_id, "PENDING")]
    assert client.get(f"/api/mentorships/{mentorship_id}", headers=auth_headers(outsider)).status_code == 403

    activated = client.post(f"/api/mentorships/{mentorship_id}/activate", headers=auth_headers(mentor))
    assert activated.json()["status"] == "ACTIVE"

    goals = client.patch(
        f"/api/mentorships/{mentorship_id}/goals",
        json={"goals": "Ship a Go CLI"},
        headers=auth_headers(mentee),
    )
    assert goals.json()["goals"] == "Ship a Go CLI"

    posted = client.post(
        f"/api/mentorships/{mentorship_id}/messages",
        json={"content": "Hi! Where do I start?"},
        headers=auth_headers(mentee),
    )
    assert posted.status_code == 201
    assert posted.json()["receiver_id"] == "mentor-m"

    completed = client.post(
        f"/api/mentorships/{mentorship_id}/complete",
        json={"notes": "Great progress"},
        headers=auth_headers(mentor),
    )
    assert completed.json()["status"] == "COMPLETED"
    assert completed.json()["end_date"] is not None

    late = client.post(
        f"/api/mentorships/{mentorship_id}/messages",
        json={"content": "One more thing"},
        headers=auth_headers(mentee),
    )
    assert late.status_code == 409
    assert late.json()["error"] == "invalid_state"

    history = client.get(f"/api/mentorships/{mentorship_id}/messages", headers=auth_headers(mentor)).json()
    assert [m["content"] for m in history] == ["Hi! Where do I start?"]

    again = client.post(f"/api/mentorships/{mentorship_id}/cancel", headers=auth_headers(mentor))
    assert again.status_code == 409


def test_regular_user_cannot_pair_other_people(client, make_user, auth_headers, admin):
    make_user("mentor-m", teaches=["go"])
    make_user("mentee-e", learns=["go"])
    outsider = make_user("outsider")
    body = {"mentor_id": "mentor-m", "mentee_id": "mentee-e"}

    assert client.post("/api/suggestions", json=body, headers=auth_headers(outsider)).status_code == 403
    assert client.post("/api/suggestions", json=body, headers=auth_headers(admin)).status_code == 201


def test_staff_can_cancel_any_mentorship(client, make_user, auth_headers, admin):
    make_user("mentor-m", teaches=["go"])
    mentee = make_user("mentee-e", learns=["go"])
    created = client.post(
        "/api/suggestions",
        json={"mentor_id": "mentor-m", "mentee_id": "mentee-e"},
        headers=auth_headers(mentee),
    ).json()
    mentorship_id = client.post(
        f"/api/suggestions/{created['id']}/respond",
        json={"decision": "accept"},
        headers=auth_headers(mentee),
    ).json()["mentorship_id"]

    canceled = client.post(
        f"/api/mentorships/{mentorship_id}/cancel",
        json={"reason": "account closed"},
        headers=auth_headers(admin),
    )

    assert canceled.status_code == 200
    assert canceled.json()["cancel_reason"] == "account closed"


def test_generate_and_list_suggestions(client, make_user, auth_headers):
    make_user("a-mentor", teaches=["go", "python"])
    make_user("b-mentor", teaches=["go"])
    mentee = make_user("mentee-e", learns=["go", "python"])

    created = client.post(
        "/api/suggestions/generate",
        json={"role": "mentee", "limit": 1},
        headers=auth_headers(mentee),
    )
    assert created.status_code == 201
    assert [s["mentor_id"] for s in created.json()] == ["a-mentor"]

    pending = client.get("/api/suggestions", params={"status": "PENDING"}, headers=auth_headers(mentee)).json()
    assert [s["mentor_id"] for s in pending] == ["a-mentor"]


def test_unknown_suggestion_is_404(client, make_user, auth_headers):
    user = make_user("mentee-e")

    response = client.post("/api/suggestions/42/respond", json={"decision": "decline"}, headers=auth_headers(user))

    assert response.status_code == 404


# ---------------------------------------------------------
# CONVERSATIONS
# ---------------------------------------------------------
def test_direct_conversation(client, make_user, auth_headers):
    zed = make_user("zed")
    amy = make_user("amy")
    bob = make_user("bob")

    opened = client.post("/api/conversations", json={"participant_id": "amy"}, headers=auth_headers(zed)).json()
    assert (opened["participant1_id"], opened["participant2_id"]) == ("amy", "zed")
    reopened = client.post("/api/conversations", json={"participant_id": "zed"}, headers=auth_headers(amy)).json()
    assert reopened["id"] == opened["id"]

    sent = client.post(
        f"/api/conversations/{opened['id']}/messages",
        json={"content": "hello"},
        headers=auth_headers(zed),
    )
    assert sent.status_code == 201
    assert sent.json()["receiver_id"] == "amy"

    assert client.get(f"/api/conversations/{opened['id']}/messages", headers=auth_headers(bob)).status_code == 403
    history = client.get(f"/api/conversations/{opened['id']}/messages", headers=auth_headers(amy)).json()
    assert [m["content"] for m in history] == ["hello"]
    assert len(client.get("/api/conversations", headers=auth_headers(amy)).json()) == 1

    with_self = client.post("/api/conversations", json={"participant_id": "zed"}, headers=auth_headers(zed))
    assert with_self.status_code == 409


def test_suggestion_for_unknown_user_is_404(client, make_user, auth_headers):
    mentee = make_user("mentee-e", learns=["go"])

    response = client.post(
        "/api/suggestions",
        json={"mentor_id": "ghost", "mentee_id": "mentee-e"},
        headers=auth_headers(mentee),
    )

    assert response.status_code == 404
    assert response.json()["error"] == "not_found"
