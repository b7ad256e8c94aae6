# (c) Copyright Datacraft, 2026
"""Ledger foundation: parties, cases, invoices and number counters.

Revision ID: cl_0001
Revises:
Create Date: 2026-10-17

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = 'cl_0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
	return [
		sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
		sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
	]


def upgrade() -> None:
	# ============ Parties ============
	op.create_table(
		'partners',
		sa.Column('id', sa.String(36), primary_key=True),
		sa.Column('name', sa.String(200), nullable=False),
		sa.Column('legal_name', sa.String(200)),
		sa.Column('id_code', sa.String(50)),
		sa.Column('country', sa.String(2), nullable=False, server_default='GE'),
		sa.Column('city', sa.String(100)),
		sa.Column('address', sa.String(500)),
		sa.Column('email', sa.String(255)),
		sa.Column('phone', sa.String(50)),
		sa.Column('website', sa.String(255)),
		sa.Column('notes', sa.Text()),
		*_timestamps(),
		sa.Column('deleted_at', sa.DateTime()),
	)
	op.create_index('idx_partners_deleted_at', 'partners', ['deleted_at'])

	op.create_table(
		'our_companies',
		sa.Column('id', sa.String(36), primary_key=True),
		sa.Column('name', sa.String(200), nullable=False),
		sa.Column('legal_name', sa.String(200), nullable=False),
		sa.Column('id_code', sa.String(50), nullable=False),
		sa.Column('country', sa.String(2), nullable=False, server_default='GE'),
		sa.Column('city', sa.String(100)),
		sa.Column('address', sa.String(500)),
		sa.Column('email', sa.String(255)),
		sa.Column('phone', sa.String(50)),
		sa.Column('website', sa.String(255)),
		sa.Column('bank_name', sa.String(200)),
		sa.Column('bank_code', sa.String(50)),
		sa.Column('account_gel', sa.String(50)),
		sa.Column('account_usd', sa.String(50)),
		sa.Column('account_eur', sa.String(50)),
		sa.Column('invoice_prefix', sa.String(10), nullable=False, server_default='INV'),
		sa.Column('invoice_footer_text', sa.Text()),
		sa.Column('is_default', sa.Boolean(), nullable=False, server_default=sa.false()),
		*_timestamps(),
		sa.Column('deleted_at', sa.DateTime()),
	)
	op.create_index('idx_our_companies_deleted_at', 'our_companies', ['deleted_at'])

	# ============ Cases ============
	op.create_table(
		'cases',
		sa.Column('id', sa.String(36), primary_key=True),
		sa.Column('case_number', sa.String(32), nullable=False),
		sa.Column('status', sa.String(20), nullable=False, server_default='draft'),
		sa.Column('priority', sa.String(10), nullable=False, server_default='normal'),
		sa.Column('patient_name', sa.String(200), nullable=False),
		sa.Column('patient_id', sa.String(50)),
		sa.Column('patient_dob', sa.Date()),
		sa.Column('patient_phone', sa.String(50)),
		sa.Column('patient_email', sa.String(255)),
		sa.Column('insurance_policy_number', sa.String(100)),
		sa.Column(
			'client_id', sa.String(36),
			sa.ForeignKey('partners.id', ondelete='SET NULL'),
		),
		sa.Column('assigned_to', sa.String(36)),
		sa.Column('is_medical', sa.Boolean(), nullable=False, server_default=sa.false()),
		sa.Column('complaints', sa.Text()),
		sa.Column('diagnosis', sa.Text()),
		sa.Column('treatment_notes', sa.Text()),
		sa.Column('opened_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
		sa.Column('closed_at', sa.DateTime()),
		sa.Column('total_service_cost', sa.Numeric(12, 2), nullable=False, server_default='0'),
		sa.Column('total_assistance_cost', sa.Numeric(12, 2), nullable=False, server_default='0'),
		sa.Column('total_commission_cost', sa.Numeric(12, 2), nullable=False, server_default='0'),
		sa.Column('actions_count', sa.Integer(), nullable=False, server_default='0'),
		sa.Column('documents_count', sa.Integer(), nullable=False, server_default='0'),
		sa.Column('invoices_count', sa.Integer(), nullable=False, server_default='0'),
		sa.Column('created_by', sa.String(36)),
		*_timestamps(),
		sa.Column('deleted_at', sa.DateTime()),
		sa.UniqueConstraint('case_number', name='uq_case_number'),
	)
	op.create_index('idx_cases_status', 'cases', ['status'])
	op.create_index('idx_cases_deleted_at', 'cases', ['deleted_at'])
	op.create_index('idx_cases_assigned_to', 'cases', ['assigned_to'])

	op.create_table(
		'case_actions',
		sa.Column('id', sa.String(36), primary_key=True),
		sa.Column(
			'case_id', sa.String(36),
			sa.ForeignKey('cases.id', ondelete='CASCADE'), nullable=False,
		),
		sa.Column(
			'executor_id', sa.String(36),
			sa.ForeignKey('partners.id', ondelete='SET NULL'),
		),
		sa.Column('service_name', sa.String(200), nullable=False),
		sa.Column('service_description', sa.Text()),
		sa.Column('service_cost', sa.Numeric(12, 2), nullable=False, server_default='0'),
		sa.Column('service_currency', sa.String(3), nullable=False, server_default='GEL'),
		sa.Column('assistance_cost', sa.Numeric(12, 2), nullable=False, server_default='0'),
		sa.Column('assistance_currency', sa.String(3), nullable=False, server_default='GEL'),
		sa.Column('commission_cost', sa.Numeric(12, 2), nullable=False, server_default='0'),
		sa.Column('commission_currency', sa.String(3), nullable=False, server_default='GEL'),
		sa.Column('service_date', sa.Date()),
		sa.Column('comment', sa.Text()),
		sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
		*_timestamps(),
	)
	op.create_index('idx_case_actions_case', 'case_actions', ['case_id', 'sort_order'])

	op.create_table(
		'case_documents',
		sa.Column('id', sa.String(36), primary_key=True),
		sa.Column(
			'case_id', sa.String(36),
			sa.ForeignKey('cases.id', ondelete='CASCADE'), nullable=False,
		),
		sa.Column('type', sa.String(20), nullable=False),
		sa.Column('file_name', sa.String(255), nullable=False),
		sa.Column('file_url', sa.String(1000), nullable=False),
		sa.Column('storage_key', sa.String(500), nullable=False),
		sa.Column('file_size', sa.Integer()),
		sa.Column('mime_type', sa.String(100)),
		sa.Column('uploaded_by', sa.String(36)),
		sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
	)
	op.create_index('idx_case_documents_case_type', 'case_documents', ['case_id', 'type'])

	# ============ Invoices ============
	op.create_table(
		'invoices',
		sa.Column('id', sa.String(36), primary_key=True),
		sa.Column('invoice_number', sa.String(32), nullable=False),
		sa.Column('status', sa.String(20), nullable=False, server_default='draft'),
		sa.Column('case_id', sa.String(36), sa.ForeignKey('cases.id'), nullable=False),
		sa.Column('sender_id', sa.String(36), sa.ForeignKey('our_companies.id'), nullable=False),
		sa.Column('recipient_id', sa.String(36), sa.ForeignKey('partners.id'), nullable=False),
		sa.Column('language', sa.String(2), nullable=False, server_default='en'),
		sa.Column('currency', sa.String(3), nullable=False, server_default='EUR'),
		sa.Column('subtotal', sa.Numeric(12, 2), nullable=False, server_default='0'),
		sa.Column('franchise_amount', sa.Numeric(12, 2), nullable=False, server_default='0'),
		sa.Column('total', sa.Numeric(12, 2), nullable=False, server_default='0'),
		sa.Column('recipient_email', sa.String(255)),
		sa.Column('cc_emails', sa.JSON()),
		sa.Column('email_subject', sa.String(200)),
		sa.Column('email_body', sa.Text()),
		sa.Column('attach_patient_docs', sa.Boolean(), nullable=False, server_default=sa.false()),
		sa.Column('attach_original_docs', sa.Boolean(), nullable=False, server_default=sa.false()),
		sa.Column('attach_medical_docs', sa.Boolean(), nullable=False, server_default=sa.false()),
		sa.Column('notes', sa.Text()),
		sa.Column('paid_at', sa.DateTime()),
		sa.Column('paid_amount', sa.Numeric(12, 2)),
		sa.Column('payment_reference', sa.String(100)),
		sa.Column('payment_notes', sa.Text()),
		sa.Column('pdf_generated_at', sa.DateTime()),
		sa.Column('send_count', sa.Integer(), nullable=False, server_default='0'),
		sa.Column('last_sent_at', sa.DateTime()),
		sa.Column('created_by', sa.String(36)),
		*_timestamps(),
		sa.Column('deleted_at', sa.DateTime()),
		sa.UniqueConstraint('invoice_number', name='uq_invoice_number'),
	)
	op.create_index('idx_invoices_case', 'invoices', ['case_id'])
	op.create_index('idx_invoices_status', 'invoices', ['status'])
	op.create_index('idx_invoices_deleted_at', 'invoices', ['deleted_at'])

	op.create_table(
		'invoice_services',
		sa.Column('id', sa.String(36), primary_key=True),
		sa.Column(
			'invoice_id', sa.String(36),
			sa.ForeignKey('invoices.id', ondelete='CASCADE'), nullable=False,
		),
		sa.Column('description', sa.String(500), nullable=False),
		sa.Column('quantity', sa.Integer(), nullable=False, server_default='1'),
		sa.Column('unit_price', sa.Numeric(12, 2), nullable=False),
		sa.Column('total', sa.Numeric(12, 2), nullable=False),
		sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
		sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
	)
	op.create_index(
		'idx_invoice_services_invoice', 'invoice_services', ['invoice_id', 'sort_order']
	)

	op.create_table(
		'invoice_sends',
		sa.Column('id', sa.String(36), primary_key=True),
		sa.Column(
			'invoice_id', sa.String(36),
			sa.ForeignKey('invoices.id', ondelete='CASCADE'), nullable=False,
		),
		sa.Column('sent_by', sa.String(36)),
		sa.Column('email', sa.String(255), nullable=False),
		sa.Column('cc_emails', sa.JSON()),
		sa.Column('subject', sa.String(200)),
		sa.Column('body', sa.Text()),
		sa.Column('status', sa.String(10), nullable=False),
		sa.Column('message_id', sa.String(255)),
		sa.Column('error_message', sa.Text()),
		sa.Column('attachments_count', sa.Integer(), nullable=False, server_default='1'),
		sa.Column('failed_attachments', sa.JSON()),
		sa.Column('is_resend', sa.Boolean(), nullable=False, server_default=sa.false()),
		sa.Column('sent_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
	)
	op.create_index('idx_invoice_sends_invoice', 'invoice_sends', ['invoice_id', 'sent_at'])

	# ============ Numbering ============
	op.create_table(
		'number_counters',
		sa.Column('prefix', sa.String(10), primary_key=True),
		sa.Column('period', sa.String(6), primary_key=True),
		sa.Column('last_value', sa.Integer(), nullable=False, server_default='0'),
		sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
	)


def downgrade() -> None:
	op.drop_table('number_counters')
	op.drop_index('idx_invoice_sends_invoice', table_name='invoice_sends')
	op.drop_table('invoice_sends')
	op.drop_index('idx_invoice_services_invoice', table_name='invoice_services')
	op.drop_table('invoice_services')
	op.drop_index('idx_invoices_deleted_at', table_name='invoices')
	op.drop_index('idx_invoices_status', table_name='invoices')
	op.drop_index('idx_invoices_case', table_name='invoices')
	op.drop_table('invoices')
	op.drop_index('idx_case_documents_case_type', table_name='case_documents')
	op.drop_table('case_documents')
	op.drop_index('idx_case_actions_case', table_name='case_actions')
	op.drop_table('case_actions')
	op.drop_index('idx_cases_assigned_to', table_name='cases')
	op.drop_index('idx_cases_deleted_at', table_name='cases')
	op.drop_index('idx_cases_status', table_name='cases')
	op.drop_table('cases')
	op.drop_index('idx_our_companies_deleted_at', table_name='our_companies')
	op.drop_table('our_companies')
	op.drop_index('idx_partners_deleted_at', table_name='partners')
	op.drop_table('partners')
