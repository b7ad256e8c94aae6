# (c) Copyright Datacraft, 2026
from httpx import AsyncClient


async def test_partner_crud(api_client: AsyncClient):
	response = await api_client.post("/partners", json={
		"name": "GPI Holding",
		"email": "claims@gpih.ge",
		"country": "GE",
	})
	assert response.status_code == 201, response.json()
	partner_id = response.json()["id"]

	response = await api_client.patch(f"/partners/{partner_id}", json={"city": "Tbilisi"})
	assert response.status_code == 200, response.json()
	assert response.json()["city"] == "Tbilisi"
	assert response.json()["email"] == "claims@gpih.ge"

	response = await api_client.get("/partners", params={"search": "gpi"})
	assert [p["id"] for p in response.json()] == [partner_id]


async def test_partner_validation(api_client: AsyncClient):
	response = await api_client.post("/partners", json={"name": "", "email": "not-an-email"})

	assert response.status_code == 400
	assert response.json()["success"] is False
	assert response.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_trashed_partner_is_hidden(api_client: AsyncClient, make_partner):
	partner = await make_partner()

	response = await api_client.delete(f"/partners/{partner.id}")
	assert response.status_code == 204

	response = await api_client.get(f"/partners/{partner.id}")
	assert response.status_code == 404
	assert (await api_client.get("/partners")).json() == []


async def test_single_default_company(api_client: AsyncClient):
	payload = {"name": "Medical Assist", "legal_name": "Medical Assist LLC", "id_code": "1"}

	response = await api_client.post("/our-companies", json={**payload, "is_default": True, "invoice_prefix": "ma"})
	assert response.status_code == 201, response.json()
	first = response.json()
	assert first["invoice_prefix"] == "MA"

	response = await api_client.post("/our-companies", json={**payload, "name": "Travel Assist", "is_default": True})
	assert response.status_code == 201, response.json()
	second = response.json()

	companies = (await api_client.get("/our-companies")).json()
	assert [(c["id"], c["is_default"]) for c in companies] == [
		(second["id"], True),
		(first["id"], False),
	]


async def test_invoice_prefix_must_be_alphanumeric(api_client: AsyncClient):
	response = await api_client.post("/our-companies", json={
		"name": "Medical Assist",
		"legal_name": "Medical Assist LLC",
		"id_code": "1",
		"invoice_prefix": "MA-1",
	})

	assert response.status_code == 400
	assert response.json()["error"]["code"] == "VALIDATION_ERROR"
