# (c) Copyright Datacraft, 2026
"""Invoice PDF rendering."""
import io
import logging
from pathlib import Path

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas

from caseledger.core.config import get_settings
from caseledger.core.features.cases.db.orm import Case
from caseledger.core.features.currency import format_money
from caseledger.core.features.partners.db.orm import OurCompany, Partner

from .db.orm import Invoice, InvoiceService

logger = logging.getLogger(__name__)

LABELS = {
	"en": {
		"invoice": "INVOICE",
		"date": "Date",
		"case": "Case",
		"from": "From",
		"to": "Bill To",
		"patient": "Patient",
		"service": "Service Description",
		"qty": "Qty",
		"unit_price": "Unit Price",
		"amount": "Amount",
		"subtotal": "Subtotal",
		"franchise": "Franchise (Deductible)",
		"total": "Total Due",
		"bank_details": "Bank Details",
		"bank_name": "Bank Name",
		"swift": "SWIFT/BIC",
		"account": "Account",
		"payment_terms": "Please process this invoice within 30 days of receipt.",
	},
	"ka": {
		"invoice": "ინვოისი",
		"date": "თარიღი",
		"case": "ქეისი",
		"from": "გამომგზავნი",
		"to": "მიმღები",
		"patient": "პაციენტი",
		"service": "სერვისის აღწერა",
		"qty": "რაოდ.",
		"unit_price": "ერთ. ფასი",
		"amount": "თანხა",
		"subtotal": "ჯამი",
		"franchise": "ფრანშიზა",
		"total": "გადასახდელი",
		"bank_details": "საბანკო რეკვიზიტები",
		"bank_name": "ბანკი",
		"swift": "SWIFT/BIC",
		"account": "ანგარიში",
		"payment_terms": "გთხოვთ დაამუშაოთ ეს ინვოისი მიღებიდან 30 დღის განმავლობაში.",
	},
}

UNICODE_FONT = "InvoiceUnicode"


class InvoicePdfRenderer:
	"""Renders an invoice to PDF bytes. Has no side effects on the ledger."""

	def __init__(self, font_path: Path | None = None):
		self.font = "Helvetica"
		self.bold_font = "Helvetica-Bold"
		self.unicode = False
		if font_path is not None:
			if UNICODE_FONT not in pdfmetrics.getRegisteredFontNames():
				pdfmetrics.registerFont(TTFont(UNICODE_FONT, str(font_path)))
			self.font = self.bold_font = UNICODE_FONT
			self.unicode = True

	def labels_for(self, language: str) -> dict[str, str]:
		if language == "ka" and not self.unicode:
			logger.warning("No unicode font configured; rendering Georgian invoice with English labels")
			return LABELS["en"]
		return LABELS.get(language, LABELS["en"])

	def render(
		self,
		invoice: Invoice,
		services: list[InvoiceService],
		sender: OurCompany,
		recipient: Partner,
		case: Case,
		language: str | None = None,
	) -> bytes:
		t = self.labels_for(language or invoice.language)
		buffer = io.BytesIO()
		c = canvas.Canvas(buffer, pagesize=A4)
		width, height = A4
		left = 20 * mm
		right = width - 20 * mm

		# Header
		c.setFont(self.bold_font, 22)
		c.drawString(left, height - 25 * mm, t["invoice"])
		c.setFont(self.font, 11)
		c.drawRightString(right, height - 20 * mm, f"#{invoice.invoice_number}")
		c.drawRightString(
			right, height - 26 * mm,
			f"{t['date']}: {invoice.created_at.strftime('%d/%m/%Y')}",
		)
		c.drawRightString(right, height - 32 * mm, f"{t['case']}: #{case.case_number}")

		# Parties
		y = height - 48 * mm
		c.setFont(self.bold_font, 10)
		c.drawString(left, y, t["from"])
		c.drawString(width / 2, y, t["to"])
		c.setFont(self.font, 10)
		sender_lines = [sender.legal_name or sender.name, sender.id_code, sender.address, sender.email]
		recipient_lines = [recipient.legal_name or recipient.name, recipient.id_code, recipient.address, recipient.email]
		for offset, (s_line, r_line) in enumerate(zip(sender_lines, recipient_lines), start=1):
			c.drawString(left, y - offset * 5 * mm, s_line or "")
			c.drawString(width / 2, y - offset * 5 * mm, r_line or "")

		y -= 30 * mm
		c.drawString(left, y, f"{t['patient']}: {case.patient_name}")

		# Service lines
		y -= 12 * mm
		c.setFont(self.bold_font, 10)
		c.drawString(left, y, t["service"])
		c.drawRightString(right - 70 * mm, y, t["qty"])
		c.drawRightString(right - 35 * mm, y, t["unit_price"])
		c.drawRightString(right, y, t["amount"])
		c.line(left, y - 2 * mm, right, y - 2 * mm)

		c.setFont(self.font, 10)
		for line in services:
			y -= 7 * mm
			if y < 60 * mm:
				c.showPage()
				c.setFont(self.font, 10)
				y = height - 25 * mm
			c.drawString(left, y, line.description[:70])
			c.drawRightString(right - 70 * mm, y, str(line.quantity))
			c.drawRightString(right - 35 * mm, y, format_money(line.unit_price))
			c.drawRightString(right, y, format_money(line.total, invoice.currency))

		# Totals
		y -= 12 * mm
		c.line(right - 80 * mm, y + 5 * mm, right, y + 5 * mm)
		c.drawString(right - 80 * mm, y, t["subtotal"])
		c.drawRightString(right, y, format_money(invoice.subtotal, invoice.currency))
		if invoice.franchise_amount:
			y -= 6 * mm
			c.drawString(right - 80 * mm, y, t["franchise"])
			c.drawRightString(right, y, f"-{format_money(invoice.franchise_amount, invoice.currency)}")
		y -= 8 * mm
		c.setFont(self.bold_font, 12)
		c.drawString(right - 80 * mm, y, t["total"])
		c.drawRightString(right, y, format_money(invoice.total, invoice.currency))

		# Bank details
		c.setFont(self.bold_font, 10)
		c.drawString(left, 45 * mm, t["bank_details"])
		c.setFont(self.font, 10)
		c.drawString(left, 39 * mm, f"{t['bank_name']}: {sender.bank_name or ''}")
		c.drawString(left, 34 * mm, f"{t['swift']}: {sender.bank_code or ''}")
		c.drawString(left, 29 * mm, f"{t['account']}: {sender.account_for(invoice.currency) or ''}")

		c.setFont(self.font, 8)
		c.drawString(left, 18 * mm, t["payment_terms"])
		if sender.invoice_footer_text:
			c.drawString(left, 13 * mm, sender.invoice_footer_text[:120])

		c.showPage()
		c.save()
		return buffer.getvalue()


_renderer: InvoicePdfRenderer | None = None


def get_pdf_renderer() -> InvoicePdfRenderer:
	global _renderer
	if _renderer is None:
		_renderer = InvoicePdfRenderer(get_settings().pdf_font_path)
	return _renderer
