from models import ProjectStatus, SkillRatingStatus


def test_login_returns_tokens(client, org):
    res = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "password123"})
    assert res.status_code == 200
    body = res.get_json()
    assert body["success"] is True
    assert body["data"]["user"]["role"] == "EMPLOYEE"
    assert body["data"]["user"]["profile"]["fullname"] == "Alice Anders"

    token = body["data"]["access_token"]
    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.get_json()["data"]["user"]["email"] == "alice@example.com"


def test_login_with_bad_password(client, org):
    res = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "wrong"})
    assert res.status_code == 401
    assert res.get_json()["success"] is False


def test_refresh_issues_access_token(client, org):
    login = client.post("/api/auth/login", json={"email": "hr@example.com", "password": "password123"})
    refresh_token = login.get_json()["data"]["refresh_token"]

    res = client.post("/api/auth/refresh", headers={"Authorization": f"Bearer {refresh_token}"})
    assert res.status_code == 200
    assert res.get_json()["data"]["access_token"]


def test_missing_token_is_unauthorized(client, org):
    assert client.get("/api/skills").status_code == 401


def test_register_requires_admin(client, org, auth_headers):
    payload = {"email": "new@example.com", "password": "longenough", "role": "hr"}

    res = client.post("/api/auth/register", json=payload, headers=auth_headers(org["hr"]))
    assert res.status_code == 403

    res = client.post("/api/auth/register", json=payload, headers=auth_headers(org["admin"]))
    assert res.status_code == 201
    assert res.get_json()["data"]["role"] == "HR"

    res = client.post("/api/auth/register", json=payload, headers=auth_headers(org["admin"]))
    assert res.status_code == 400


def test_self_rating_out_of_range_maps_to_400(client, seed, org, auth_headers):
    skill = seed.skill("Python")
    alice_user = org["alice"].user

    res = client.post(
        "/api/employee-skills",
        json={"skill_id": skill.id, "self_rating": 6},
        headers=auth_headers(alice_user),
    )
    assert res.status_code == 400
    assert res.get_json() == {"success": False, "error": "Rating must be between 1 and 5"}


def test_schema_errors_map_to_400(client, org, auth_headers):
    res = client.post("/api/employee-skills", json={"self_rating": 3}, headers=auth_headers(org["alice"].user))
    assert res.status_code == 400
    body = res.get_json()
    assert body["error"] == "Validation error"
    assert "skill_id" in body["errors"]


def test_rating_review_flow_over_http(client, seed, org, auth_headers):
    skill = seed.skill("Python")
    created = client.post(
        "/api/employee-skills",
        json={"skill_id": skill.id, "self_rating": 4},
        headers=auth_headers(org["alice"].user),
    )
    assert created.status_code == 201
    rating_id = created.get_json()["data"]["id"]
    assert created.get_json()["data"]["status"] == "PENDING"

    pending = client.get("/api/employee-skills/pending", headers=auth_headers(org["manager"].user))
    assert [r["id"] for r in pending.get_json()["data"]] == [rating_id]

    reviewed = client.patch(
        f"/api/employee-skills/{rating_id}/review",
        json={"action": "edit", "approved_rating": 3, "review_comment": "Good"},
        headers=auth_headers(org["manager"].user),
    )
    assert reviewed.status_code == 200
    assert reviewed.get_json()["data"]["status"] == "EDITED"
    assert reviewed.get_json()["data"]["approved_rating"] == 3

    again = client.patch(
        f"/api/employee-skills/{rating_id}/review",
        json={"action": "APPROVE"},
        headers=auth_headers(org["manager"].user),
    )
    assert again.status_code == 400

    mine = client.get("/api/employee-skills/my-ratings", headers=auth_headers(org["alice"].user))
    assert mine.get_json()["data"][0]["skill"]["name"] == "Python"


def test_manager_mismatch_maps_to_403(client, seed, org, auth_headers):
    skill = seed.skill("Python")
    other = seed.profile("Other Manager", org["department"], role=org["manager"].user.role)
    rating = seed.rating(org["alice"], skill, 3)

    res = client.patch(
        f"/api/employee-skills/{rating.id}/review",
        json={"action": "APPROVE"},
        headers=auth_headers(other.user),
    )
    assert res.status_code == 403
    assert res.get_json()["error"] == "Manager mismatch"


def test_role_gate_maps_to_403(client, org, auth_headers):
    res = client.post("/api/projects", json={"name": "Portal"}, headers=auth_headers(org["alice"].user))
    assert res.status_code == 403


def test_not_found_maps_to_404(client, org, auth_headers):
    res = client.get("/api/projects/999", headers=auth_headers(org["hr"]))
    assert res.status_code == 404
    assert res.get_json() == {"success": False, "error": "Project not found"}


def test_project_and_deliverable_endpoints(client, seed, org, auth_headers):
    hr = auth_headers(org["hr"])
    skill = seed.skill("Python")

    project = client.post(
        "/api/projects",
        json={"name": "Portal", "start_date": "2024-01-01", "end_date": "2024-03-01"},
        headers=hr,
    )
    assert project.status_code == 201
    project_id = project.get_json()["data"]["id"]
    assert project.get_json()["data"]["status"] == "PLANNED"

    bad_dates = client.post(
        "/api/projects",
        json={"name": "Backwards", "start_date": "2024-03-01", "end_date": "2024-01-01"},
        headers=hr,
    )
    assert bad_dates.status_code == 400

    deliverable = client.post(f"/api/projects/{project_id}/deliverables", json={"name": "Backend"}, headers=hr)
    assert deliverable.status_code == 201
    deliverable_id = deliverable.get_json()["data"]["id"]

    weight = client.post(
        f"/api/deliverables/{deliverable_id}/skills",
        json={"skill_id": skill.id, "weight": 1.5},
        headers=hr,
    )
    assert weight.status_code == 400
    assert weight.get_json()["error"] == "Weight must be between 0 and 1"

    added = client.post(
        f"/api/deliverables/{deliverable_id}/skills",
        json={"skill_id": skill.id, "weight": 0.8},
        headers=hr,
    )
    assert added.status_code == 201

    detail = client.get(f"/api/projects/{project_id}", headers=hr)
    assert detail.get_json()["data"]["deliverables"][0]["required_skills"][0]["skill"]["name"] == "Python"

    skipped = client.patch(f"/api/projects/{project_id}/status", json={"status": "COMPLETED"}, headers=hr)
    assert skipped.status_code == 400

    activated = client.patch(f"/api/projects/{project_id}/status", json={"status": "active"}, headers=hr)
    assert activated.status_code == 200
    assert activated.get_json()["data"]["status"] == "ACTIVE"

    deleted = client.delete(f"/api/projects/{project_id}", headers=hr)
    assert deleted.status_code == 400


def test_assignment_flow_over_http(client, seed, org, auth_headers):
    project = seed.project(status=ProjectStatus.ACTIVE)
    deliverable = seed.deliverable(project, "Backend")

    created = client.post(
        f"/api/deliverables/{deliverable.id}/request-assignment",
        json={"employee_id": org["alice"].id},
        headers=auth_headers(org["hr"]),
    )
    assert created.status_code == 201
    request_id = created.get_json()["data"]["id"]

    reviewed = client.patch(
        f"/api/assignment-requests/{request_id}/review",
        json={"action": "APPROVE"},
        headers=auth_headers(org["manager"].user),
    )
    assert reviewed.status_code == 200
    assert reviewed.get_json()["data"]["status"] == "APPROVED"

    mine = client.get("/api/employees/me/assignments", headers=auth_headers(org["alice"].user))
    assert [a["deliverable_id"] for a in mine.get_json()["data"]["active"]] == [deliverable.id]

    team = client.get("/api/employees/my-team", headers=auth_headers(org["manager"].user))
    by_name = {m["fullname"]: m for m in team.get_json()["data"]}
    assert by_name["Alice Anders"]["active_assignment"]["deliverable_id"] == deliverable.id
    assert by_name["Bob Brown"]["active_assignment"] is None


def test_assignment_request_for_planned_project(client, seed, org, auth_headers):
    deliverable = seed.deliverable(seed.project(), "Backend")
    res = client.post(
        f"/api/deliverables/{deliverable.id}/request-assignment",
        json={"employee_id": org["alice"].id},
        headers=auth_headers(org["hr"]),
    )
    assert res.status_code == 400
    assert res.get_json()["error"] == "Project is not active"


def test_recommendations_top_k_validation(client, seed, org, auth_headers):
    skill = seed.skill("Python")
    deliverable = seed.deliverable(seed.project(), skills=[(skill, 1.0)])
    seed.rating(org["alice"], skill, 4, status=SkillRatingStatus.APPROVED, approved_rating=4)
    hr = auth_headers(org["hr"])

    for bad in ("0", "1001", "abc"):
        res = client.get(f"/api/deliverables/{deliverable.id}/recommendations?topK={bad}", headers=hr)
        assert res.status_code == 400
        assert res.get_json()["error"] == "topK must be between 1 and 1000"

    res = client.get(f"/api/deliverables/{deliverable.id}/recommendations?topK=1", headers=hr)
    assert res.status_code == 200
    assert res.get_json()["data"][0]["employee_name"] == "Alice Anders"


def test_employee_listing_is_paginated(client, org, auth_headers):
    res = client.get("/api/employees?per_page=2", headers=auth_headers(org["admin"]))
    assert res.status_code == 200
    data = res.get_json()["data"]
    assert len(data["items"]) == 2
    assert data["pagination"]["total"] == 3
    assert data["pagination"]["has_next"] is True


def test_assign_manager_endpoint(client, seed, org, auth_headers):
    carol = seed.profile("Carol Chen", org["department"])
    res = client.patch(
        f"/api/employees/{carol.id}/assign-manager",
        json={"manager_id": carol.id},
        headers=auth_headers(org["admin"]),
    )
    assert res.status_code == 400
    assert res.get_json()["error"] == "Self assignment is not allowed"


def test_dashboard_stats_endpoint(client, org, auth_headers):
    res = client.get("/api/analytics/dashboard-stats", headers=auth_headers(org["manager"].user))
    assert res.status_code == 200
    assert res.get_json()["data"]["total_employees"] == 3

    res = client.get("/api/analytics/dashboard-stats", headers=auth_headers(org["alice"].user))
    assert res.status_code == 403
