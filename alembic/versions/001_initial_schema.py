"""Initial schema: organisation, requests, ledger, routing, notifications

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-17

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

STAGES = ('DRAFT', 'PENDING_DEPARTMENT_HEAD', 'PENDING_PROCUREMENT', 'PENDING_CFP',
          'PENDING_DIRECTOR', 'APPROVED', 'REJECTED')
SIGNATURE_ROLES = ('REQUESTER', 'DEPARTMENT_HEAD', 'PROCUREMENT', 'CFP', 'DIRECTOR')


def _timestamp(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        server_default=sa.text('CURRENT_TIMESTAMP'),
        nullable=nullable,
    )


def upgrade() -> None:
    if 'requests' in sa.inspect(op.get_bind()).get_table_names():
        return

    op.create_table(
        'departments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        _timestamp('created_at'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_departments_id'), 'departments', ['id'], unique=False)
    op.create_index(op.f('ix_departments_name'), 'departments', ['name'], unique=True)

    op.create_table(
        'employees',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('emp_code', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('role', sa.String(), nullable=False, server_default='EMPLOYEE'),
        sa.Column('department_id', sa.Integer(), nullable=False),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        _timestamp('created_at'),
        sa.ForeignKeyConstraint(['department_id'], ['departments.id'], ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_employees_id'), 'employees', ['id'], unique=False)
    op.create_index(op.f('ix_employees_emp_code'), 'employees', ['emp_code'], unique=True)

    op.create_table(
        'holidays',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('kind', sa.Enum('PUBLIC', 'CUSTOM', name='holidaykind'), nullable=False),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        _timestamp('created_at'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_holidays_id'), 'holidays', ['id'], unique=False)
    op.create_index(op.f('ix_holidays_year'), 'holidays', ['year'], unique=False)
    op.create_index(op.f('ix_holidays_date'), 'holidays', ['date'], unique=True)

    op.create_table(
        'audit_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('actor_id', sa.Integer(), nullable=False),
        sa.Column('action', sa.String(), nullable=False),
        sa.Column('entity_type', sa.String(), nullable=False),
        sa.Column('entity_id', sa.Integer(), nullable=True),
        sa.Column('meta_json', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['actor_id'], ['employees.id'], ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_audit_logs_id'), 'audit_logs', ['id'], unique=False)

    op.create_table(
        'requests',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('request_number', sa.String(32), nullable=False),
        sa.Column('variant', sa.Enum('LEAVE', 'PROCUREMENT', 'HR_DOCUMENT', name='requestvariant'), nullable=False),
        sa.Column('requester_id', sa.Integer(), nullable=False),
        sa.Column('status', sa.Enum(*STAGES, name='requeststatus'), nullable=False),
        sa.Column('title', sa.String(255), nullable=True),
        sa.Column('details', sa.JSON(), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('working_days', sa.Integer(), nullable=True),
        sa.Column('replacement_name', sa.String(255), nullable=True),
        sa.Column('category', sa.String(50), nullable=True),
        sa.Column('urgency', sa.String(30), nullable=True),
        sa.Column('estimated_value', sa.Numeric(12, 2), nullable=True),
        sa.Column('currency', sa.String(3), nullable=True),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.Column('submitted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('decided_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        _timestamp('updated_at'),
        sa.ForeignKeyConstraint(['requester_id'], ['employees.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint(
            'start_date IS NULL OR end_date IS NULL OR start_date <= end_date',
            name='check_request_start_le_end',
        ),
    )
    op.create_index(op.f('ix_requests_id'), 'requests', ['id'], unique=False)
    op.create_index(op.f('ix_requests_request_number'), 'requests', ['request_number'], unique=True)
    op.create_index(op.f('ix_requests_variant'), 'requests', ['variant'], unique=False)
    op.create_index(op.f('ix_requests_requester_id'), 'requests', ['requester_id'], unique=False)
    op.create_index(op.f('ix_requests_status'), 'requests', ['status'], unique=False)
    op.create_index('ix_requests_requester_dates', 'requests', ['requester_id', 'start_date', 'end_date'], unique=False)

    op.create_table(
        'procurement_items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('request_id', sa.Integer(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit', sa.String(20), nullable=False),
        sa.Column('unit_price', sa.Numeric(12, 2), nullable=False),
        sa.Column('specifications', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['request_id'], ['requests.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_procurement_items_id'), 'procurement_items', ['id'], unique=False)
    op.create_index(op.f('ix_procurement_items_request_id'), 'procurement_items', ['request_id'], unique=False)

    op.create_table(
        'request_signatures',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('request_id', sa.Integer(), nullable=False),
        sa.Column('role', sa.Enum(*SIGNATURE_ROLES, name='signaturerole'), nullable=False),
        sa.Column('signer_id', sa.Integer(), nullable=False),
        sa.Column('signed_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('blob_ref', sa.String(500), nullable=True),
        sa.ForeignKeyConstraint(['request_id'], ['requests.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['signer_id'], ['employees.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('request_id', 'role', name='uq_request_signature_role'),
    )
    op.create_index(op.f('ix_request_signatures_id'), 'request_signatures', ['id'], unique=False)
    op.create_index(op.f('ix_request_signatures_request_id'), 'request_signatures', ['request_id'], unique=False)

    op.create_table(
        'request_approvals',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('request_id', sa.Integer(), nullable=False),
        sa.Column('stage', postgresql.ENUM(*STAGES, name='requeststatus', create_type=False), nullable=False),
        sa.Column('action', sa.Enum('APPROVE', 'REJECT', name='approvalaction'), nullable=False),
        sa.Column('action_by', sa.Integer(), nullable=False),
        sa.Column('remarks', sa.Text(), nullable=True),
        sa.Column('action_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['request_id'], ['requests.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['action_by'], ['employees.id'], ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_request_approvals_id'), 'request_approvals', ['id'], unique=False)
    op.create_index(op.f('ix_request_approvals_request_id'), 'request_approvals', ['request_id'], unique=False)

    op.create_table(
        'request_notes',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('request_id', sa.Integer(), nullable=False),
        sa.Column('author_id', sa.Integer(), nullable=False),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['request_id'], ['requests.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['author_id'], ['employees.id'], ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_request_notes_id'), 'request_notes', ['id'], unique=False)
    op.create_index(op.f('ix_request_notes_request_id'), 'request_notes', ['request_id'], unique=False)

    op.create_table(
        'leave_balances',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('employee_id', sa.Integer(), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('total_days', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('used_days', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('carryover_initial', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('carryover_remaining', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('carryover_from_year', sa.Integer(), nullable=True),
        sa.Column('version_id', sa.Integer(), nullable=False),
        _timestamp('created_at'),
        _timestamp('updated_at'),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('employee_id', 'year', name='uq_leave_balances_employee_year'),
        sa.CheckConstraint('used_days >= 0', name='check_used_days_non_negative'),
        sa.CheckConstraint(
            'carryover_remaining >= 0 AND carryover_remaining <= carryover_initial',
            name='check_carryover_remaining_bounds',
        ),
        sa.CheckConstraint(
            'total_days + carryover_remaining - used_days >= 0',
            name='check_remaining_non_negative',
        ),
    )
    op.create_index(op.f('ix_leave_balances_id'), 'leave_balances', ['id'], unique=False)
    op.create_index(op.f('ix_leave_balances_employee_id'), 'leave_balances', ['employee_id'], unique=False)
    op.create_index(op.f('ix_leave_balances_year'), 'leave_balances', ['year'], unique=False)

    op.create_table(
        'leave_transactions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('employee_id', sa.Integer(), nullable=False),
        sa.Column('request_id', sa.Integer(), nullable=True),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('delta_days', sa.Integer(), nullable=False),
        sa.Column('action', sa.String(30), nullable=False),
        sa.Column('remarks', sa.Text(), nullable=True),
        sa.Column('action_by_employee_id', sa.Integer(), nullable=True),
        sa.Column('action_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.id'], ),
        sa.ForeignKeyConstraint(['request_id'], ['requests.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['action_by_employee_id'], ['employees.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_leave_transactions_id'), 'leave_transactions', ['id'], unique=False)
    op.create_index(op.f('ix_leave_transactions_employee_id'), 'leave_transactions', ['employee_id'], unique=False)
    op.create_index(op.f('ix_leave_transactions_request_id'), 'leave_transactions', ['request_id'], unique=False)
    op.create_index(op.f('ix_leave_transactions_year'), 'leave_transactions', ['year'], unique=False)
    op.create_index(
        op.f('ix_leave_transactions_action_by_employee_id'),
        'leave_transactions', ['action_by_employee_id'], unique=False,
    )

    op.create_table(
        'approval_delegations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('delegator_id', sa.Integer(), nullable=False),
        sa.Column('delegate_id', sa.Integer(), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('reason', sa.String(255), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['delegator_id'], ['employees.id'], ),
        sa.ForeignKeyConstraint(['delegate_id'], ['employees.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('start_date <= end_date', name='check_delegation_window'),
    )
    op.create_index(op.f('ix_approval_delegations_id'), 'approval_delegations', ['id'], unique=False)
    op.create_index(op.f('ix_approval_delegations_delegator_id'), 'approval_delegations', ['delegator_id'], unique=False)
    op.create_index(op.f('ix_approval_delegations_delegate_id'), 'approval_delegations', ['delegate_id'], unique=False)

    op.create_table(
        'approval_assignments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('stage', postgresql.ENUM(*STAGES, name='requeststatus', create_type=False), nullable=False),
        sa.Column('employee_id', sa.Integer(), nullable=True),
        sa.Column('department_id', sa.Integer(), nullable=True),
        sa.Column('approver_id', sa.Integer(), nullable=False),
        sa.Column('delegation_start', sa.Date(), nullable=True),
        sa.Column('delegation_end', sa.Date(), nullable=True),
        sa.Column('delegation_id', sa.Integer(), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.id'], ),
        sa.ForeignKeyConstraint(['department_id'], ['departments.id'], ),
        sa.ForeignKeyConstraint(['approver_id'], ['employees.id'], ),
        sa.ForeignKeyConstraint(['delegation_id'], ['approval_delegations.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('(employee_id IS NULL) <> (department_id IS NULL)', name='check_assignment_single_target'),
        sa.CheckConstraint(
            'delegation_start IS NULL OR delegation_end IS NULL OR delegation_start <= delegation_end',
            name='check_assignment_window',
        ),
    )
    op.create_index(op.f('ix_approval_assignments_id'), 'approval_assignments', ['id'], unique=False)
    op.create_index(op.f('ix_approval_assignments_stage'), 'approval_assignments', ['stage'], unique=False)
    op.create_index(op.f('ix_approval_assignments_employee_id'), 'approval_assignments', ['employee_id'], unique=False)
    op.create_index(op.f('ix_approval_assignments_department_id'), 'approval_assignments', ['department_id'], unique=False)
    op.create_index(op.f('ix_approval_assignments_approver_id'), 'approval_assignments', ['approver_id'], unique=False)

    op.create_table(
        'notifications',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('recipient_id', sa.Integer(), nullable=False),
        sa.Column('kind', sa.Enum('APPROVED', 'REJECTED', 'AWAITING_APPROVAL', name='notificationkind'), nullable=False),
        sa.Column('request_id', sa.Integer(), nullable=True),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('read', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['recipient_id'], ['employees.id'], ),
        sa.ForeignKeyConstraint(['request_id'], ['requests.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_notifications_id'), 'notifications', ['id'], unique=False)
    op.create_index(op.f('ix_notifications_recipient_id'), 'notifications', ['recipient_id'], unique=False)
    op.create_index(op.f('ix_notifications_request_id'), 'notifications', ['request_id'], unique=False)


def downgrade() -> None:
    for table in (
        'notifications',
        'approval_assignments',
        'approval_delegations',
        'leave_transactions',
        'leave_balances',
        'request_notes',
        'request_approvals',
        'request_signatures',
        'procurement_items',
        'requests',
        'audit_logs',
        'holidays',
        'employees',
        'departments',
    ):
        op.drop_table(table)
    bind = op.get_bind()
    if bind.dialect.name == 'postgresql':
        for enum_name in ('notificationkind', 'approvalaction', 'signaturerole', 'requeststatus',
                          'requestvariant', 'holidaykind'):
            op.execute(f'DROP TYPE IF EXISTS {enum_name}')
