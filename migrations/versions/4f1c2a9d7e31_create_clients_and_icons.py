"""create_clients_and_icons

Revision ID: 4f1c2a9d7e31
Revises:
Create Date: 2026-10-17 09:12:44.318205

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '4f1c2a9d7e31'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


employment_type_enum = postgresql.ENUM(
    'DG', 'DG_ETAT', 'DG_AKCJONARIUSZ', 'DG_HALF_TIME_BELOW_MIN', 'DG_HALF_TIME_ABOVE_MIN',
    name='clients_employmenttype_enum',
    create_type=False,
)
vat_status_enum = postgresql.ENUM(
    'VAT_MONTHLY', 'VAT_QUARTERLY', 'NO', 'NO_WATCH_LIMIT',
    name='clients_vatstatus_enum',
    create_type=False,
)
tax_scheme_enum = postgresql.ENUM(
    'PIT_17', 'PIT_19', 'LUMP_SUM', 'GENERAL',
    name='clients_taxscheme_enum',
    create_type=False,
)
zus_status_enum = postgresql.ENUM(
    'FULL', 'PREFERENTIAL', 'NONE',
    name='clients_zusstatus_enum',
    create_type=False,
)
aml_group_enum = postgresql.ENUM(
    'LOW', 'MEDIUM', 'HIGH',
    name='clients_amlgroup_enum',
    create_type=False,
)

ENUMS = (employment_type_enum, vat_status_enum, tax_scheme_enum, zus_status_enum, aml_group_enum)


def upgrade() -> None:
    """Create clients, client_icons and client_icon_assignments."""
    bind = op.get_bind()
    for enum_type in ENUMS:
        enum_type.create(bind, checkfirst=True)

    op.create_table(
        'clients',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('company_id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('nip', sa.String(length=20), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('pkd_code', sa.String(length=20), nullable=True),
        sa.Column('company_start_date', sa.Date(), nullable=True),
        sa.Column('cooperation_start_date', sa.Date(), nullable=True),
        sa.Column('suspension_date', sa.Date(), nullable=True),
        sa.Column('company_specificity', sa.Text(), nullable=True),
        sa.Column('additional_info', sa.Text(), nullable=True),
        sa.Column('gtu_code', sa.String(length=20), nullable=True),
        sa.Column('aml_group', sa.String(length=50), nullable=True),
        sa.Column('gtu_codes', postgresql.ARRAY(sa.String(length=20)), nullable=True),
        sa.Column('aml_group_enum', aml_group_enum, nullable=True),
        sa.Column('employment_type', employment_type_enum, nullable=True),
        sa.Column('vat_status', vat_status_enum, nullable=True),
        sa.Column('tax_scheme', tax_scheme_enum, nullable=True),
        sa.Column('zus_status', zus_status_enum, nullable=True),
        sa.Column('receive_email_copy', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_by_id', sa.Uuid(), nullable=True),
        sa.Column('updated_by_id', sa.Uuid(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_clients_company_id', 'clients', ['company_id'])
    op.create_index('ix_clients_name', 'clients', ['name'])
    op.create_index('ix_clients_nip', 'clients', ['nip'])
    op.create_index('ix_clients_is_active', 'clients', ['is_active'])

    op.create_table(
        'client_icons',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('company_id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('color', sa.String(length=20), nullable=True),
        sa.Column('icon_type', sa.String(length=20), nullable=False, server_default='custom'),
        sa.Column('icon_value', sa.String(length=100), nullable=True),
        sa.Column('tooltip', sa.String(length=255), nullable=True),
        sa.Column('file_name', sa.String(length=255), nullable=True),
        sa.Column('file_path', sa.String(length=500), nullable=True),
        sa.Column('mime_type', sa.String(length=100), nullable=True),
        sa.Column('file_size', sa.Integer(), nullable=True),
        sa.Column('auto_assign_condition', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_by_id', sa.Uuid(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_client_icons_company_id', 'client_icons', ['company_id'])
    op.create_index('ix_client_icons_icon_type', 'client_icons', ['icon_type'])
    # Per-tenant lookup of icons that carry a condition
    op.create_index(
        'ix_client_icons_company_id_active_condition',
        'client_icons',
        ['company_id'],
        postgresql_where=sa.text('is_active AND auto_assign_condition IS NOT NULL'),
    )

    op.create_table(
        'client_icon_assignments',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('client_id', sa.Uuid(), nullable=False),
        sa.Column('icon_id', sa.Uuid(), nullable=False),
        sa.Column('is_auto_assigned', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['icon_id'], ['client_icons.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('client_id', 'icon_id', name='uq_client_icon_assignments_pair'),
    )
    op.create_index('ix_client_icon_assignments_client_id', 'client_icon_assignments', ['client_id'])
    op.create_index('ix_client_icon_assignments_icon_id', 'client_icon_assignments', ['icon_id'])
    op.create_index(
        'ix_client_icon_assignments_is_auto_assigned',
        'client_icon_assignments',
        ['is_auto_assigned'],
    )


def downgrade() -> None:
    """Drop the client icon tables and enum types."""
    op.drop_index('ix_client_icon_assignments_is_auto_assigned', table_name='client_icon_assignments')
    op.drop_index('ix_client_icon_assignments_icon_id', table_name='client_icon_assignments')
    op.drop_index('ix_client_icon_assignments_client_id', table_name='client_icon_assignments')
    op.drop_table('client_icon_assignments')

    op.drop_index('ix_client_icons_company_id_active_condition', table_name='client_icons')
    op.drop_index('ix_client_icons_icon_type', table_name='client_icons')
    op.drop_index('ix_client_icons_company_id', table_name='client_icons')
    op.drop_table('client_icons')

    op.drop_index('ix_clients_is_active', table_name='clients')
    op.drop_index('ix_clients_nip', table_name='clients')
    op.drop_index('ix_clients_name', table_name='clients')
    op.drop_index('ix_clients_company_id', table_name='clients')
    op.drop_table('clients')

    bind = op.get_bind()
    for enum_type in reversed(ENUMS):
        enum_type.drop(bind, checkfirst=True)
