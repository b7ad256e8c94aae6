# (c) Copyright Datacraft, 2026
"""
Case router tests.
"""
import csv
import io
from decimal import Decimal

from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession


async def test_create_case_allocates_number(api_client: AsyncClient):
	response = await api_client.post("/cases", json={"patient_name": "Giorgi Kapanadze"})

	assert response.status_code == 201, response.json()
	data = response.json()
	assert data["case_number"].startswith("CASE-")
	assert data["case_number"].endswith("-00001")
	assert data["status"] == "draft"
	assert data["total_service_cost"] == 0
	assert data["actions_count"] == 0


async def test_case_totals_are_not_client_editable(api_client: AsyncClient, make_case):
	case = await make_case()

	response = await api_client.patch(
		f"/cases/{case.id}",
		json={"total_service_cost": 5000, "priority": "high"},
	)

	assert response.status_code == 200, response.json()
	data = response.json()
	assert data["priority"] == "high"
	assert data["total_service_cost"] == 0


async def test_closing_a_case_sets_closed_at(api_client: AsyncClient, make_case):
	case = await make_case()

	response = await api_client.patch(f"/cases/{case.id}", json={"status": "completed"})
	assert response.json()["closed_at"] is not None

	response = await api_client.patch(f"/cases/{case.id}", json={"status": "in_progress"})
	assert response.json()["closed_at"] is None


async def test_action_mutations_return_reconciled_case(api_client: AsyncClient, make_case):
	case = await make_case()

	response = await api_client.post(
		f"/cases/{case.id}/actions",
		json={"service_name": "Hospitalization", "service_cost": "100", "service_currency": "EUR"},
	)
	assert response.status_code == 201, response.json()
	first = response.json()
	assert first["case"]["total_service_cost"] == 100.0
	assert first["case"]["actions_count"] == 1

	response = await api_client.post(
		f"/cases/{case.id}/actions",
		json={"service_name": "Transport", "service_cost": "50"},
	)
	assert response.json()["case"]["total_service_cost"] == 150.0

	response = await api_client.delete(f"/cases/{case.id}/actions/{first['action']['id']}")
	assert response.status_code == 200, response.json()
	data = response.json()
	assert data["action"] is None
	assert data["case"]["total_service_cost"] == 50.0
	assert data["case"]["actions_count"] == 1


async def test_reorder_endpoint_rejects_partial_lists(api_client: AsyncClient, make_case, make_action):
	case = await make_case()
	a = await make_action(case.id)
	await make_action(case.id)

	response = await api_client.put(
		f"/cases/{case.id}/actions/reorder",
		json={"actions": [{"id": a.id, "sort_order": 0}]},
	)

	assert response.status_code == 400
	assert response.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_invalid_payload_is_validation_error(api_client: AsyncClient):
	response = await api_client.post("/cases", json={"patient_name": ""})

	assert response.status_code == 400
	body = response.json()
	assert body["success"] is False
	assert body["error"]["code"] == "VALIDATION_ERROR"


async def test_missing_actor_is_unauthorized(api_client: AsyncClient):
	response = await api_client.get("/cases", headers={"X-Forwarded-User": ""})

	assert response.status_code == 401
	assert response.json()["error"]["code"] == "UNAUTHORIZED"


async def test_trashed_case_is_not_found(api_client: AsyncClient, make_case):
	case = await make_case()

	response = await api_client.delete(f"/cases/{case.id}")
	assert response.status_code == 204

	response = await api_client.get(f"/cases/{case.id}")
	assert response.status_code == 404
	assert response.json()["error"]["code"] == "NOT_FOUND"

	response = await api_client.get("/cases")
	assert response.json()["total"] == 0


async def test_upload_and_delete_document(
	api_client: AsyncClient,
	db_session: AsyncSession,
	make_case,
	storage,
):
	case = await make_case()

	response = await api_client.post(
		f"/cases/{case.id}/documents",
		files={"file": ("passport scan.pdf", b"%PDF-1.4 scan", "application/pdf")},
		data={"type": "patient"},
	)
	assert response.status_code == 201, response.json()
	document = response.json()
	assert document["type"] == "patient"
	assert document["file_size"] == len(b"%PDF-1.4 scan")

	response = await api_client.get(f"/cases/{case.id}")
	assert response.json()["documents_count"] == 1

	key = storage.key_from_url(document["file_url"])
	assert await storage.exists(key)

	response = await api_client.delete(f"/cases/{case.id}/documents/{document['id']}")
	assert response.status_code == 204
	assert not await storage.exists(key)

	response = await api_client.get(f"/cases/{case.id}")
	assert response.json()["documents_count"] == 0


async def test_action_with_unknown_executor_is_not_found(api_client: AsyncClient, make_case):
	case = await make_case()

	response = await api_client.post(
		f"/cases/{case.id}/actions",
		json={"service_name": "Ambulance", "executor_id": "no-such-partner"},
	)

	assert response.status_code == 404
	assert response.json()["error"]["code"] == "NOT_FOUND"

	response = await api_client.get(f"/cases/{case.id}")
	assert response.json()["actions_count"] == 0


async def test_export_cases_csv(api_client: AsyncClient, make_case, make_partner, make_action):
	client = await make_partner(name="Aldagi, Travel Desk")
	case = await make_case(patient_name="Nino Beridze", client_id=client.id)
	await make_action(case.id, service_cost=Decimal("120.5"))
	trashed = await make_case(patient_name="Trashed Patient")
	await api_client.delete(f"/cases/{trashed.id}")

	response = await api_client.get("/cases/export")

	assert response.status_code == 200
	assert response.headers["content-type"].startswith("text/csv")
	assert "attachment; filename=\"cases_" in response.headers["content-disposition"]
	rows = list(csv.DictReader(io.StringIO(response.text)))
	assert len(rows) == 1
	assert rows[0]["Case Number"] == case.case_number
	assert rows[0]["Client"] == "Aldagi, Travel Desk"
	assert rows[0]["Service Cost"] == "120.50"
	assert rows[0]["Actions"] == "1"
	assert rows[0]["Closed"] == ""


async def test_export_cases_json_with_status_filter(api_client: AsyncClient, make_case):
	open_case = await make_case(patient_name="Open Patient")
	await api_client.patch(f"/cases/{open_case.id}", json={"status": "in_progress"})
	await make_case(patient_name="Draft Patient")

	response = await api_client.get("/cases/export", params={"format": "json", "status": "in_progress"})

	assert response.status_code == 200, response.json()
	data = response.json()
	assert [row["Patient Name"] for row in data] == ["Open Patient"]
	assert data[0]["Status"] == "in_progress"


async def test_export_with_no_cases_has_header_only(api_client: AsyncClient):
	response = await api_client.get("/cases/export")

	assert response.status_code == 200
	assert response.text.splitlines() == [
		"Case Number,Status,Priority,Patient Name,Patient ID,Birth Date,Client,"
		"Assigned To,Medical,Opened,Closed,Service Cost,Assistance Cost,"
		"Commission Cost,Actions,Documents,Invoices"
	]
