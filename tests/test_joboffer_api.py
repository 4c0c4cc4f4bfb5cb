"""POST/GET/PUT/DELETE /api/joboffer."""

import pytest

from cemse.models import Company, JobOffer, UserRole
from tests.factories import job_offer_payload, token_for


async def test_create_job_offer(company_client, registered_company):
    response = await company_client.post("/api/joboffer", json=job_offer_payload(registered_company["id"]))

    assert response.status_code == 201
    body = response.json()
    assert body["id"]
    assert body["status"] == "ACTIVE"
    assert body["isActive"] is True
    assert body["images"] == []
    assert body["skillsRequired"] == ["Python", "FastAPI"]
    assert body["salaryCurrency"] == "BOB"
    assert body["department"] == "Cochabamba"
    assert body["publishedAt"].endswith("Z")
    assert body["company"] == {
        "id": registered_company["id"],
        "name": registered_company["name"],
        "email": registered_company["email"],
    }


@pytest.mark.parametrize("deadline", ["not-a-date", "9999-12-31T23:00:00-05:00", "0001-01-01T00:00:00+05:00"])
async def test_malformed_deadline_is_stored_as_null(company_client, registered_company, deadline):
    response = await company_client.post(
        "/api/joboffer",
        json=job_offer_payload(registered_company["id"], applicationDeadline=deadline),
    )

    assert response.status_code == 201
    assert response.json()["applicationDeadline"] is None


async def test_valid_deadline_round_trips_as_utc(company_client, registered_company):
    response = await company_client.post(
        "/api/joboffer",
        json=job_offer_payload(registered_company["id"], applicationDeadline="2026-12-31T23:59:59Z"),
    )

    assert response.status_code == 201
    assert response.json()["applicationDeadline"] == "2026-12-31T23:59:59Z"


async def test_missing_fields_are_listed(company_client, count_rows):
    response = await company_client.post("/api/joboffer", json={"title": "Solo titulo"})

    assert response.status_code == 400
    assert response.json()["error"].startswith("Missing required fields: description, requirements")
    assert await count_rows(JobOffer) == 0


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"contractType": "SOMETIMES"}, "Invalid contractType"),
        ({"workModality": "ON_THE_MOON"}, "Invalid workModality"),
        ({"salaryMin": "mucho"}, "salaryMin must be a number"),
        ({"salaryMin": "NaN", "salaryMax": "inf"}, "salaryMin must be a number"),
        ({"salaryMax": "1e999"}, "salaryMax must be a number"),
        ({"salaryMin": 9000, "salaryMax": 3000}, "salaryMin cannot be greater than salaryMax"),
    ],
)
async def test_invalid_values_are_400(company_client, registered_company, count_rows, overrides, message):
    response = await company_client.post(
        "/api/joboffer", json=job_offer_payload(registered_company["id"], **overrides)
    )

    assert response.status_code == 400
    assert response.json()["error"].startswith(message)
    assert await count_rows(JobOffer) == 0


async def test_non_json_body_is_400(company_client):
    response = await company_client.post(
        "/api/joboffer", content=b"{not json", headers={"content-type": "application/json"}
    )
    assert response.status_code == 400


async def test_multipart_with_images(company_client, registered_company):
    form = job_offer_payload(registered_company["id"])
    form["skillsRequired"] = '["Python", "SQL"]'
    form["benefits"] = "Seguro, Bonos"
    form["salaryMin"] = "4000"
    form["salaryMax"] = "7000"

    response = await company_client.post(
        "/api/joboffer",
        data=form,
        files=[
            ("images", ("oficina.png", b"\x89PNG fake", "image/png")),
            ("images", ("equipo.jpg", b"\xff\xd8 fake", "image/jpeg")),
        ],
    )

    assert response.status_code == 201, response.text
    body = response.json()
    assert body["images"] == []
    assert body["skillsRequired"] == ["Python", "SQL"]
    assert body["benefits"] == ["Seguro", "Bonos"]
    assert body["salaryMin"] == 4000.0


async def test_company_cannot_publish_for_another_company(app, make_client, create_user, registered_company):
    other = await create_user("otra_empresa", UserRole.COMPANIES)

    async with make_client(app, token_for(other)) as client:
        response = await client.post("/api/joboffer", json=job_offer_payload(registered_company["id"]))

    assert response.status_code == 403


async def test_company_row_is_provisioned_for_company_user(app, make_client, create_user, session_factory):
    user = await create_user("nueva_empresa", UserRole.COMPANIES)

    async with make_client(app, token_for(user)) as client:
        response = await client.post("/api/joboffer", json=job_offer_payload(user.id))

    assert response.status_code == 201, response.text
    assert response.json()["company"]["id"] == user.id
    assert response.json()["company"]["email"] == "nueva_empresa@cemse.dev"
    async with session_factory() as session:
        company = await session.get(Company, user.id)
    assert company.name == "Mi Empresa"
    assert company.municipality_id == "municipality_1"


async def test_superadmin_needs_existing_company(admin_client, count_rows):
    response = await admin_client.post("/api/joboffer", json=job_offer_payload("no-such-company"))

    assert response.status_code == 400
    assert response.json()["error"] == "Company not found"
    assert await count_rows(Company) == 0


@pytest.mark.parametrize("role", [UserRole.YOUTH, UserRole.MUNICIPAL_GOVERNMENTS, UserRole.INSTRUCTOR])
async def test_other_roles_cannot_publish(app, make_client, create_user, registered_company, role):
    user = await create_user(f"u_{role.value.lower()}", role)

    async with make_client(app, token_for(user)) as client:
        response = await client.post("/api/joboffer", json=job_offer_payload(registered_company["id"]))

    assert response.status_code == 403
    assert response.json()["allowedRoles"] == ["COMPANIES", "SUPERADMIN"]


async def test_public_listing_never_includes_inactive_offers(company_client, anon_client, registered_company):
    company_id = registered_company["id"]
    active = (await company_client.post("/api/joboffer", json=job_offer_payload(company_id))).json()
    hidden = (
        await company_client.post("/api/joboffer", json=job_offer_payload(company_id, title="Oculta"))
    ).json()

    update = await company_client.put(f"/api/joboffer/{hidden['id']}", json={"isActive": False})
    assert update.status_code == 200
    assert update.json()["isActive"] is False

    public = (await anon_client.get("/api/joboffer")).json()
    assert [offer["id"] for offer in public["jobOffers"]] == [active["id"]]
    assert all(offer["isActive"] for offer in public["jobOffers"])
    assert public["total"] == 1

    by_company = (await anon_client.get("/api/joboffer", params={"companyId": company_id})).json()
    assert {offer["id"] for offer in by_company["jobOffers"]} == {active["id"], hidden["id"]}


async def test_listing_filters(company_client, anon_client, registered_company):
    company_id = registered_company["id"]
    await company_client.post("/api/joboffer", json=job_offer_payload(company_id, category="Ventas"))
    await company_client.post(
        "/api/joboffer", json=job_offer_payload(company_id, municipality="La Paz", status="PAUSED")
    )

    ventas = (await anon_client.get("/api/joboffer", params={"category": "ventas"})).json()
    paused = (await anon_client.get("/api/joboffer", params={"status": "PAUSED"})).json()
    la_paz = (await anon_client.get("/api/joboffer", params={"municipality": "paz"})).json()

    assert [o["category"] for o in ventas["jobOffers"]] == ["Ventas"]
    assert [o["status"] for o in paused["jobOffers"]] == ["PAUSED"]
    assert [o["municipality"] for o in la_paz["jobOffers"]] == ["La Paz"]


async def test_inactive_offer_detail_is_visible_to_owner_only(company_client, anon_client, registered_company):
    offer = (await company_client.post("/api/joboffer", json=job_offer_payload(registered_company["id"]))).json()
    await company_client.put(f"/api/joboffer/{offer['id']}", json={"isActive": False})

    assert (await anon_client.get(f"/api/joboffer/{offer['id']}")).status_code == 404
    assert (await company_client.get(f"/api/joboffer/{offer['id']}")).status_code == 200


async def test_update_cannot_move_offer_or_break_salary_range(company_client, registered_company):
    offer = (await company_client.post("/api/joboffer", json=job_offer_payload(registered_company["id"]))).json()

    moved = await company_client.put(
        f"/api/joboffer/{offer['id']}", json={"companyId": "elsewhere", "title": "Senior Backend"}
    )
    broken = await company_client.put(f"/api/joboffer/{offer['id']}", json={"salaryMax": 1000})

    assert moved.status_code == 200
    assert moved.json()["companyId"] == registered_company["id"]
    assert moved.json()["title"] == "Senior Backend"
    assert broken.status_code == 400


async def test_other_company_cannot_modify_or_delete(app, make_client, create_user, company_client, registered_company):
    offer = (await company_client.post("/api/joboffer", json=job_offer_payload(registered_company["id"]))).json()
    other = await create_user("competidor", UserRole.COMPANIES)

    async with make_client(app, token_for(other)) as client:
        update = await client.put(f"/api/joboffer/{offer['id']}", json={"title": "Hijacked"})
        delete = await client.delete(f"/api/joboffer/{offer['id']}")

    assert update.status_code == 403
    assert delete.status_code == 403


async def test_delete_job_offer(company_client, anon_client, registered_company, count_rows):
    offer = (await company_client.post("/api/joboffer", json=job_offer_payload(registered_company["id"]))).json()

    response = await company_client.delete(f"/api/joboffer/{offer['id']}")

    assert response.status_code == 200
    assert await count_rows(JobOffer) == 0
    assert (await anon_client.get(f"/api/joboffer/{offer['id']}")).status_code == 404
