# (c) Copyright Datacraft, 2026
"""Default invoice email content per language."""
from caseledger.core.features.cases.db.orm import Case
from caseledger.core.features.currency import CURRENCY_SYMBOLS, to_money
from caseledger.core.features.partners.db.orm import OurCompany, Partner

from .db.orm import Invoice

EMAIL_TEMPLATES = {
	"en": {
		"subject": "Invoice #{invoice_number} for Case #{case_number}",
		"body": (
			"Dear Partner,\n"
			"\n"
			"Please find attached the invoice #{invoice_number} for the medical "
			"assistance services provided.\n"
			"\n"
			"Case Details:\n"
			"- Case Number: #{case_number}\n"
			"- Patient: {patient_name}\n"
			"- Invoice Date: {invoice_date}\n"
			"\n"
			"Invoice Summary:\n"
			"- Subtotal: {subtotal}\n"
			"- Franchise: {franchise}\n"
			"- Total Due: {total}\n"
			"\n"
			"Payment Details:\n"
			"Bank: {bank_name}\n"
			"SWIFT: {bank_code}\n"
			"IBAN: {iban}\n"
			"\n"
			"Please process this invoice within 30 days of receipt.\n"
			"\n"
			"Best regards,\n"
			"{sender_name}\n"
			"{company_name}\n"
			"{company_email}\n"
			"{company_phone}"
		),
	},
	"ka": {
		"subject": "ინვოისი #{invoice_number} ქეისის #{case_number} თაობაზე",
		"body": (
			"პატივცემულო პარტნიორო,\n"
			"\n"
			"გიგზავნით ინვოისს #{invoice_number} გაწეული სამედიცინო "
			"ასისტანსის მომსახურებისთვის.\n"
			"\n"
			"ქეისის დეტალები:\n"
			"- ქეისის ნომერი: #{case_number}\n"
			"- პაციენტი: {patient_name}\n"
			"- ინვოისის თარიღი: {invoice_date}\n"
			"\n"
			"ინვოისის შეჯამება:\n"
			"- ჯამი: {subtotal}\n"
			"- ფრანშიზა: {franchise}\n"
			"- გადასახდელი: {total}\n"
			"\n"
			"საბანკო რეკვიზიტები:\n"
			"ბანკი: {bank_name}\n"
			"SWIFT: {bank_code}\n"
			"IBAN: {iban}\n"
			"\n"
			"გთხოვთ დაამუშაოთ ეს ინვოისი მიღებიდან 30 დღის განმავლობაში.\n"
			"\n"
			"პატივისცემით,\n"
			"{sender_name}\n"
			"{company_name}\n"
			"{company_email}\n"
			"{company_phone}"
		),
	},
}

def _money(amount, currency: str) -> str:
	return f"{to_money(amount):.2f} {CURRENCY_SYMBOLS.get(currency, currency)}"


def template_variables(
	invoice: Invoice,
	sender: OurCompany,
	recipient: Partner,
	case: Case,
) -> dict[str, str]:
	return {
		"invoice_number": invoice.invoice_number,
		"case_number": case.case_number,
		"patient_name": case.patient_name,
		"invoice_date": invoice.created_at.strftime("%d/%m/%Y"),
		"subtotal": _money(invoice.subtotal, invoice.currency),
		"franchise": _money(invoice.franchise_amount, invoice.currency) if invoice.franchise_amount else "-",
		"total": _money(invoice.total, invoice.currency),
		"bank_name": sender.bank_name or "",
		"bank_code": sender.bank_code or "",
		"iban": sender.account_for(invoice.currency) or "",
		"sender_name": sender.name,
		"company_name": sender.legal_name or sender.name,
		"company_email": sender.email or "",
		"company_phone": sender.phone or "",
		"recipient_name": recipient.name,
	}


def default_email_content(
	invoice: Invoice,
	sender: OurCompany,
	recipient: Partner,
	case: Case,
) -> tuple[str, str]:
	template = EMAIL_TEMPLATES.get(invoice.language, EMAIL_TEMPLATES["en"])
	variables = template_variables(invoice, sender, recipient, case)
	return template["subject"].format(**variables), template["body"].format(**variables)
