"""create time_record and contact_record

Revision ID: 3b7e9c1d2a40
Revises:
Create Date: 2026-10-19 00:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3b7e9c1d2a40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    if 'time_record' not in existing_tables:
        op.create_table(
            'time_record',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('seconds', sa.Integer(), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        )

    if 'contact_record' not in existing_tables:
        op.create_table(
            'contact_record',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('name', sa.String(length=128), nullable=False),
            sa.Column('email', sa.String(length=254), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        )
        op.create_index('ix_contact_record_email', 'contact_record', ['email'], unique=True)


def downgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    if 'contact_record' in existing_tables:
        op.drop_index('ix_contact_record_email', table_name='contact_record')
        op.drop_table('contact_record')
    if 'time_record' in existing_tables:
        op.drop_table('time_record')
