from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001_initial'
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        'tables',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('identifier', sa.String(length=32), nullable=False, unique=True),
        sa.Column('number', sa.Integer(), nullable=False, unique=True),
    )

    op.create_table(
        'reservations',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('order_id', sa.String(length=32), nullable=False),
        sa.Column('full_name', sa.String(length=120), nullable=False),
        sa.Column('phone', sa.String(length=10), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('time_slot', sa.String(length=8), nullable=False),
        sa.Column('guests', sa.Integer(), nullable=False),
        sa.Column('owner_user_id', sa.String(length=64), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_reservations_order_id', 'reservations', ['order_id'], unique=True)
    op.create_index('ix_reservations_phone', 'reservations', ['phone'])
    op.create_index('ix_reservations_date_slot', 'reservations', ['date', 'time_slot'])

    op.create_table(
        'reservation_tables',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('reservation_id', sa.Integer(), sa.ForeignKey('reservations.id', ondelete='CASCADE'), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('time_slot', sa.String(length=8), nullable=False),
        sa.Column('table_id', sa.String(length=32), sa.ForeignKey('tables.identifier'), nullable=False),
        sa.UniqueConstraint('date', 'time_slot', 'table_id', name='uq_reservation_slot_table'),
    )
    op.create_index('ix_reservation_tables_reservation_id', 'reservation_tables', ['reservation_id'])

    op.create_table(
        'takeaway_orders',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('order_id', sa.String(length=32), nullable=False),
        sa.Column('full_name', sa.String(length=120), nullable=False),
        sa.Column('phone', sa.String(length=10), nullable=False),
        sa.Column('address', sa.String(length=500), nullable=False),
        sa.Column('items', sa.JSON(), nullable=False),
        sa.Column('subtotal', sa.Numeric(10, 2), nullable=False),
        sa.Column('tax', sa.Numeric(10, 2), nullable=False),
        sa.Column('ac_tax', sa.Numeric(10, 2), nullable=False),
        sa.Column('gst', sa.Numeric(10, 2), nullable=False),
        sa.Column('delivery_charge', sa.Numeric(10, 2), nullable=False),
        sa.Column('total', sa.Numeric(10, 2), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_takeaway_orders_order_id', 'takeaway_orders', ['order_id'], unique=True)
    op.create_index('ix_takeaway_orders_phone', 'takeaway_orders', ['phone'])

def downgrade():
    op.drop_index('ix_takeaway_orders_phone', table_name='takeaway_orders')
    op.drop_index('ix_takeaway_orders_order_id', table_name='takeaway_orders')
    op.drop_table('takeaway_orders')
    op.drop_index('ix_reservation_tables_reservation_id', table_name='reservation_tables')
    op.drop_table('reservation_tables')
    op.drop_index('ix_reservations_date_slot', table_name='reservations')
    op.drop_index('ix_reservations_phone', table_name='reservations')
    op.drop_index('ix_reservations_order_id', table_name='reservations')
    op.drop_table('reservations')
    op.drop_table('tables')
