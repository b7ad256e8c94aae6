# (c) Copyright Datacraft, 2026
import csv
import io

from httpx import AsyncClient

from caseledger.core.mail import MailResult


async def test_create_and_get_invoice(api_client: AsyncClient, make_case, make_company, make_partner):
	case = await make_case()
	company = await make_company()
	partner = await make_partner()

	response = await api_client.post("/invoices", json={
		"case_id": case.id,
		"sender_id": company.id,
		"recipient_id": partner.id,
		"franchise_amount": "25.00",
		"subtotal": "9999",
		"total": "9999",
		"services": [
			{"description": "Consultation", "quantity": 2, "unit_price": "50.00"},
			{"description": "Ambulance", "unit_price": "75.00"},
		],
	})

	assert response.status_code == 201, response.json()
	data = response.json()
	assert data["status"] == "draft"
	assert data["invoice_number"].startswith("MA-")
	assert float(data["subtotal"]) == 175
	assert float(data["total"]) == 150
	assert [s["description"] for s in data["services"]] == ["Consultation", "Ambulance"]

	response = await api_client.get(f"/invoices/{data['id']}")
	assert response.status_code == 200, response.json()
	assert response.json()["invoice_number"] == data["invoice_number"]

	response = await api_client.get(f"/cases/{case.id}")
	assert response.json()["invoices_count"] == 1


async def test_list_filters_by_status(api_client: AsyncClient, make_invoice):
	draft = await make_invoice()
	await make_invoice(status="unpaid")

	response = await api_client.get("/invoices", params={"status": "draft"})

	assert response.status_code == 200, response.json()
	data = response.json()
	assert data["total"] == 1
	assert data["items"][0]["id"] == draft.id


async def test_mark_paid_twice(api_client: AsyncClient, make_invoice):
	invoice = await make_invoice(status="unpaid")

	response = await api_client.post(f"/invoices/{invoice.id}/mark-paid", json={})
	assert response.status_code == 200, response.json()
	assert response.json()["status"] == "paid"

	response = await api_client.post(f"/invoices/{invoice.id}/mark-paid", json={})
	assert response.status_code == 400
	assert response.json()["error"]["code"] == "ALREADY_PAID"


async def test_send_and_history(api_client: AsyncClient, mailer, make_invoice):
	invoice = await make_invoice()

	response = await api_client.post(f"/invoices/{invoice.id}/send", json={})

	assert response.status_code == 200, response.json()
	data = response.json()
	assert data["message_id"] == "msg-0001"
	assert data["email"] == "claims@partner-insurer.ge"
	assert data["attachments_count"] == 1

	response = await api_client.get(f"/invoices/{invoice.id}/sends")
	assert response.status_code == 200, response.json()
	history = response.json()
	assert len(history) == 1
	assert history[0]["status"] == "sent"
	assert history[0]["sent_by"] == "handler-1"

	response = await api_client.get(f"/invoices/{invoice.id}")
	assert response.json()["status"] == "unpaid"


async def test_failed_send_is_kept_in_history(api_client: AsyncClient, mailer, make_invoice):
	mailer.result = MailResult(success=False, error="rejected")
	invoice = await make_invoice()

	response = await api_client.post(f"/invoices/{invoice.id}/send", json={})

	assert response.status_code == 502
	assert response.json()["error"]["code"] == "SEND_FAILED"

	response = await api_client.get(f"/invoices/{invoice.id}/sends")
	history = response.json()
	assert len(history) == 1
	assert history[0]["status"] == "failed"
	assert history[0]["error_message"] == "rejected"


async def test_send_without_email(api_client: AsyncClient, make_partner, make_invoice):
	partner = await make_partner(email=None)
	invoice = await make_invoice(recipient=partner)

	response = await api_client.post(f"/invoices/{invoice.id}/send", json={})

	assert response.status_code == 400
	assert response.json() == {
		"success": False,
		"error": {"code": "NO_EMAIL", "message": response.json()["error"]["message"]},
	}


async def test_pdf_download(api_client: AsyncClient, make_invoice):
	invoice = await make_invoice()

	response = await api_client.get(f"/invoices/{invoice.id}/pdf", params={"language": "ka"})

	assert response.status_code == 200
	assert response.headers["content-type"] == "application/pdf"
	assert invoice.invoice_number in response.headers["content-disposition"]
	assert response.content.startswith(b"%PDF")


async def test_duplicate_and_cancel(api_client: AsyncClient, make_invoice):
	invoice = await make_invoice(status="unpaid")

	response = await api_client.post(f"/invoices/{invoice.id}/duplicate")
	assert response.status_code == 201, response.json()
	clone = response.json()
	assert clone["status"] == "draft"
	assert clone["invoice_number"] != invoice.invoice_number

	response = await api_client.post(f"/invoices/{invoice.id}/cancel")
	assert response.status_code == 200, response.json()
	assert response.json()["status"] == "cancelled"

	response = await api_client.patch(f"/invoices/{invoice.id}", json={"status": "unpaid"})
	assert response.status_code == 400
	assert response.json()["error"]["code"] == "INVALID_STATUS"


async def test_delete_moves_to_trash(api_client: AsyncClient, make_invoice):
	invoice = await make_invoice()

	response = await api_client.delete(f"/invoices/{invoice.id}")
	assert response.status_code == 204

	response = await api_client.get(f"/invoices/{invoice.id}")
	assert response.status_code == 404
	assert response.json()["error"]["code"] == "NOT_FOUND"


async def test_export_invoices_csv(api_client: AsyncClient, make_invoice, make_partner):
	recipient = await make_partner(name="Global Assist, Inc.")
	invoice = await make_invoice(services=[("Consultation", 2, "50.00")], recipient=recipient)
	trashed = await make_invoice()
	await api_client.delete(f"/invoices/{trashed.id}")

	response = await api_client.get("/invoices/export", params={"format": "csv"})

	assert response.status_code == 200
	assert response.headers["content-type"].startswith("text/csv")
	assert "attachment; filename=\"invoices_" in response.headers["content-disposition"]
	rows = list(csv.DictReader(io.StringIO(response.text)))
	assert len(rows) == 1
	row = rows[0]
	assert row["Invoice Number"] == invoice.invoice_number
	assert row["Status"] == "draft"
	assert row["To"] == "Global Assist, Inc."
	assert row["From"] == "Medical Assist"
	assert row["Total"] == "100.00"
	assert row["Sent"] == ""
	assert row["Send Count"] == "0"


async def test_export_invoices_json_with_status_filter(api_client: AsyncClient, make_invoice):
	await make_invoice()
	unpaid = await make_invoice(status="unpaid")

	response = await api_client.get("/invoices/export", params={"format": "json", "status": "unpaid"})

	assert response.status_code == 200, response.json()
	data = response.json()
	assert [row["Invoice Number"] for row in data] == [unpaid.invoice_number]
	assert data[0]["Paid"] == ""


async def test_export_rejects_unknown_format(api_client: AsyncClient):
	response = await api_client.get("/invoices/export", params={"format": "xlsx"})

	assert response.status_code == 400
	assert response.json()["error"]["code"] == "VALIDATION_ERROR"
