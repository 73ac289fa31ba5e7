"""Initial database schema

Revision ID: 0001
Revises:
Create Date: 2026-03-01 09:00:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _uuid_pk() -> sa.Column:
    return sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False)


def _created_at() -> sa.Column:
    return sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False)


def _updated_at() -> sa.Column:
    return sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False)


def _toggle(name: str) -> sa.Column:
    return sa.Column(name, sa.Boolean(), server_default=sa.true(), nullable=False)


def _money(name: str) -> sa.Column:
    return sa.Column(name, sa.Numeric(precision=12, scale=2), nullable=False)


def upgrade() -> None:
    """Upgrade database schema."""
    # Catalog
    op.create_table('tours',
        _uuid_pk(),
        sa.Column('tour_number', sa.String(length=10), nullable=False),
        sa.Column('slug', sa.String(length=255), nullable=False),
        sa.Column('status', sa.String(length=20), server_default='draft', nullable=False),
        sa.Column('pricing_engine', sa.String(length=32), nullable=False),
        sa.Column('meta', postgresql.JSONB(), server_default='{}', nullable=False),
        sa.Column('tags', postgresql.JSONB(), server_default='[]', nullable=False),
        sa.Column('hero_background_image', sa.Text(), nullable=True),
        sa.Column('featured_images', postgresql.JSONB(), server_default='[]', nullable=False),
        sa.Column('main_media', postgresql.JSONB(), nullable=True),
        sa.Column('additional_photos', postgresql.JSONB(), server_default='[]', nullable=False),
        sa.Column('video_embed_code', sa.Text(), nullable=True),
        sa.Column('video_section_title', sa.String(length=255), nullable=True),
        sa.Column('google_reviews', postgresql.JSONB(), server_default='[]', nullable=False),
        sa.Column('google_rating', sa.Float(), nullable=True),
        sa.Column('google_review_count', sa.Integer(), nullable=True),
        sa.Column('itinerary_title', sa.String(length=255), nullable=True),
        sa.Column('itinerary_images', postgresql.JSONB(), server_default='[]', nullable=False),
        _toggle('description_enabled'),
        _toggle('images_enabled'),
        _toggle('packages_enabled'),
        _toggle('itinerary_enabled'),
        _toggle('video_enabled'),
        _toggle('google_reviews_enabled'),
        _toggle('safety_info_enabled'),
        _toggle('need_help_enabled'),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('tour_number'),
        sa.UniqueConstraint('slug')
    )
    op.create_index(op.f('ix_tours_tour_number'), 'tours', ['tour_number'], unique=False)
    op.create_index(op.f('ix_tours_slug'), 'tours', ['slug'], unique=False)
    op.create_index(op.f('ix_tours_status'), 'tours', ['status'], unique=False)

    op.create_table('tour_pricing',
        _uuid_pk(),
        sa.Column('tour_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('config', postgresql.JSONB(), server_default='{}', nullable=False),
        _created_at(),
        _updated_at(),
        sa.ForeignKeyConstraint(['tour_id'], ['tours.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('tour_id')
    )
    op.create_index(op.f('ix_tour_pricing_tour_id'), 'tour_pricing', ['tour_id'], unique=False)

    op.create_table('tour_blocks',
        _uuid_pk(),
        sa.Column('tour_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('block_type', sa.String(length=32), nullable=False),
        sa.Column('order', sa.Integer(), server_default='0', nullable=False),
        _toggle('enabled'),
        sa.Column('config', postgresql.JSONB(), server_default='{}', nullable=False),
        _created_at(),
        _updated_at(),
        sa.ForeignKeyConstraint(['tour_id'], ['tours.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_tour_blocks_tour_id'), 'tour_blocks', ['tour_id'], unique=False)

    op.create_table('tour_block_translations',
        _uuid_pk(),
        sa.Column('block_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('language', sa.String(length=5), nullable=False),
        sa.Column('title', sa.String(length=500), nullable=True),
        sa.Column('content', postgresql.JSONB(), server_default='{}', nullable=False),
        _updated_at(),
        sa.ForeignKeyConstraint(['block_id'], ['tour_blocks.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('block_id', 'language', name='uq_block_translation_language')
    )
    op.create_index(op.f('ix_tour_block_translations_block_id'), 'tour_block_translations', ['block_id'], unique=False)

    op.create_table('upsells',
        _uuid_pk(),
        sa.Column('tour_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('pricing_type', sa.String(length=20), server_default='per_booking', nullable=False),
        _money('retail_price'),
        _money('net_price'),
        sa.Column('currency', sa.String(length=3), server_default='THB', nullable=False),
        sa.Column('max_quantity', sa.Integer(), nullable=True),
        sa.Column('status', sa.String(length=20), server_default='active', nullable=False),
        sa.Column('order', sa.Integer(), server_default='0', nullable=False),
        _created_at(),
        _updated_at(),
        sa.CheckConstraint('retail_price >= 0', name='ck_upsell_retail_non_negative'),
        sa.CheckConstraint('net_price >= 0', name='ck_upsell_net_non_negative'),
        sa.ForeignKeyConstraint(['tour_id'], ['tours.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_upsells_tour_id'), 'upsells', ['tour_id'], unique=False)
    op.create_index(op.f('ix_upsells_status'), 'upsells', ['status'], unique=False)

    op.create_table('upsell_translations',
        _uuid_pk(),
        sa.Column('upsell_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('language', sa.String(length=5), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['upsell_id'], ['upsells.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('upsell_id', 'language', name='uq_upsell_translation_language')
    )
    op.create_index(op.f('ix_upsell_translations_upsell_id'), 'upsell_translations', ['upsell_id'], unique=False)

    op.create_table('tour_packages',
        _uuid_pk(),
        sa.Column('tour_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('pricing_type', sa.String(length=20), server_default='per_person', nullable=False),
        sa.Column('pricing_config', postgresql.JSONB(), server_default='{}', nullable=False),
        sa.Column('included_items', postgresql.JSONB(), server_default='[]', nullable=False),
        _toggle('calendar_enabled'),
        sa.Column('calendar_config', postgresql.JSONB(), server_default='{}', nullable=False),
        _toggle('pickup_enabled'),
        sa.Column('order', sa.Integer(), server_default='0', nullable=False),
        _toggle('enabled'),
        _created_at(),
        _updated_at(),
        sa.ForeignKeyConstraint(['tour_id'], ['tours.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_tour_packages_tour_id'), 'tour_packages', ['tour_id'], unique=False)

    op.create_table('package_upsells',
        _uuid_pk(),
        sa.Column('package_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        _money('price'),
        sa.Column('pricing_type', sa.String(length=20), server_default='per_booking', nullable=False),
        sa.Column('order', sa.Integer(), server_default='0', nullable=False),
        _toggle('enabled'),
        sa.ForeignKeyConstraint(['package_id'], ['tour_packages.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_package_upsells_package_id'), 'package_upsells', ['package_id'], unique=False)

    # Taxonomy
    op.create_table('tour_categories',
        _uuid_pk(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('slug', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('icon', sa.String(length=64), nullable=True),
        sa.Column('order', sa.Integer(), server_default='0', nullable=False),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('slug')
    )
    op.create_index(op.f('ix_tour_categories_slug'), 'tour_categories', ['slug'], unique=False)

    op.create_table('special_labels',
        _uuid_pk(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('slug', sa.String(length=255), nullable=False),
        sa.Column('background_color', sa.String(length=16), nullable=False),
        sa.Column('text_color', sa.String(length=16), nullable=False),
        sa.Column('order', sa.Integer(), server_default='0', nullable=False),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('slug')
    )
    op.create_index(op.f('ix_special_labels_slug'), 'special_labels', ['slug'], unique=False)

    op.create_table('tour_category_assignments',
        sa.Column('tour_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('category_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.ForeignKeyConstraint(['tour_id'], ['tours.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['category_id'], ['tour_categories.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('tour_id', 'category_id')
    )

    op.create_table('tour_special_label_assignments',
        sa.Column('tour_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('label_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.ForeignKeyConstraint(['tour_id'], ['tours.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['label_id'], ['special_labels.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('tour_id', 'label_id')
    )

    # Availability and bookings
    op.create_table('tour_availability',
        _uuid_pk(),
        sa.Column('tour_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('time_slot', sa.String(length=5), nullable=True),
        sa.Column('capacity', sa.Integer(), server_default='20', nullable=False),
        sa.Column('booked', sa.Integer(), server_default='0', nullable=False),
        _toggle('enabled'),
        _created_at(),
        _updated_at(),
        sa.CheckConstraint('capacity >= 0', name='ck_availability_capacity_non_negative'),
        sa.CheckConstraint('booked >= 0', name='ck_availability_booked_non_negative'),
        sa.ForeignKeyConstraint(['tour_id'], ['tours.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('tour_id', 'date', 'time_slot', name='uq_availability_tour_date_slot')
    )
    op.create_index(op.f('ix_tour_availability_tour_id'), 'tour_availability', ['tour_id'], unique=False)
    op.create_index(op.f('ix_tour_availability_date'), 'tour_availability', ['date'], unique=False)

    op.create_table('bookings',
        _uuid_pk(),
        sa.Column('reference', sa.String(length=32), nullable=False),
        sa.Column('tour_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('availability_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('booking_date', sa.Date(), nullable=False),
        sa.Column('customer_name', sa.String(length=255), nullable=False),
        sa.Column('customer_email', sa.String(length=255), nullable=False),
        sa.Column('customer_phone', sa.String(length=64), nullable=True),
        sa.Column('customer_nationality', sa.String(length=64), nullable=True),
        _money('total_retail'),
        _money('total_net'),
        sa.Column('currency', sa.String(length=3), server_default='THB', nullable=False),
        sa.Column('status', sa.String(length=20), server_default='pending', nullable=False),
        sa.Column('language', sa.String(length=5), server_default='en', nullable=False),
        sa.Column('voucher_token', sa.String(length=64), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('stripe_payment_intent_id', sa.String(length=255), nullable=True),
        _created_at(),
        _updated_at(),
        sa.CheckConstraint('total_retail >= 0', name='ck_booking_total_retail_non_negative'),
        sa.CheckConstraint('total_net >= 0', name='ck_booking_total_net_non_negative'),
        sa.CheckConstraint('length(reference) > 0', name='ck_booking_reference_not_empty'),
        sa.ForeignKeyConstraint(['tour_id'], ['tours.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['availability_id'], ['tour_availability.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('reference'),
        sa.UniqueConstraint('voucher_token')
    )
    op.create_index(op.f('ix_bookings_reference'), 'bookings', ['reference'], unique=False)
    op.create_index(op.f('ix_bookings_tour_id'), 'bookings', ['tour_id'], unique=False)
    op.create_index(op.f('ix_bookings_availability_id'), 'bookings', ['availability_id'], unique=False)
    op.create_index(op.f('ix_bookings_booking_date'), 'bookings', ['booking_date'], unique=False)
    op.create_index(op.f('ix_bookings_customer_email'), 'bookings', ['customer_email'], unique=False)
    op.create_index(op.f('ix_bookings_status'), 'bookings', ['status'], unique=False)
    op.create_index(op.f('ix_bookings_stripe_payment_intent_id'), 'bookings', ['stripe_payment_intent_id'], unique=False)
    op.create_index(op.f('ix_bookings_created_at'), 'bookings', ['created_at'], unique=False)

    op.create_table('booking_items',
        _uuid_pk(),
        sa.Column('booking_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('item_type', sa.String(length=10), nullable=False),
        sa.Column('item_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('item_name', sa.String(length=255), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        _money('retail_price_snapshot'),
        _money('net_price_snapshot'),
        _money('subtotal_retail'),
        _money('subtotal_net'),
        sa.Column('metadata', postgresql.JSONB(), nullable=True),
        _created_at(),
        sa.CheckConstraint('quantity > 0', name='ck_booking_item_quantity_positive'),
        sa.ForeignKeyConstraint(['booking_id'], ['bookings.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_booking_items_booking_id'), 'booking_items', ['booking_id'], unique=False)

    # Content
    op.create_table('static_pages',
        _uuid_pk(),
        sa.Column('slug', sa.String(length=255), nullable=False),
        sa.Column('status', sa.String(length=20), server_default='draft', nullable=False),
        sa.Column('page_type', sa.String(length=20), server_default='content', nullable=False),
        sa.Column('icon', sa.String(length=64), nullable=True),
        sa.Column('order', sa.Integer(), server_default='0', nullable=False),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('slug')
    )
    op.create_index(op.f('ix_static_pages_slug'), 'static_pages', ['slug'], unique=False)

    op.create_table('static_page_translations',
        _uuid_pk(),
        sa.Column('page_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('language', sa.String(length=5), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('content', postgresql.JSONB(), server_default='{}', nullable=False),
        sa.Column('meta_title', sa.String(length=255), nullable=True),
        sa.Column('meta_description', sa.Text(), nullable=True),
        _created_at(),
        _updated_at(),
        sa.ForeignKeyConstraint(['page_id'], ['static_pages.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('page_id', 'language', name='uq_page_translation_language')
    )
    op.create_index(op.f('ix_static_page_translations_page_id'), 'static_page_translations', ['page_id'], unique=False)

    op.create_table('ui_translations',
        _uuid_pk(),
        sa.Column('translation_key', sa.String(length=255), nullable=False),
        sa.Column('category', sa.String(length=64), server_default='general', nullable=False),
        sa.Column('en', sa.Text(), nullable=False),
        sa.Column('zh', sa.Text(), nullable=True),
        sa.Column('ru', sa.Text(), nullable=True),
        sa.Column('ko', sa.Text(), nullable=True),
        sa.Column('ja', sa.Text(), nullable=True),
        sa.Column('fr', sa.Text(), nullable=True),
        sa.Column('it', sa.Text(), nullable=True),
        sa.Column('es', sa.Text(), nullable=True),
        sa.Column('id_lang', sa.Text(), nullable=True),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('translation_key')
    )
    op.create_index(op.f('ix_ui_translations_translation_key'), 'ui_translations', ['translation_key'], unique=False)
    op.create_index(op.f('ix_ui_translations_category'), 'ui_translations', ['category'], unique=False)

    # Analytics
    op.create_table('page_visits',
        _uuid_pk(),
        sa.Column('page_path', sa.String(length=1024), nullable=False),
        sa.Column('session_id', sa.String(length=128), nullable=False),
        sa.Column('visitor_ip_hash', sa.String(length=16), nullable=False),
        sa.Column('country_code', sa.String(length=2), nullable=True),
        sa.Column('country_name', sa.String(length=128), nullable=True),
        sa.Column('city', sa.String(length=128), nullable=True),
        sa.Column('device_type', sa.String(length=16), server_default='desktop', nullable=False),
        sa.Column('browser', sa.String(length=32), server_default='Unknown', nullable=False),
        sa.Column('operating_system', sa.String(length=32), server_default='Unknown', nullable=False),
        sa.Column('referrer', sa.Text(), nullable=True),
        sa.Column('referrer_domain', sa.String(length=255), nullable=True),
        sa.Column('user_agent', sa.String(length=500), nullable=True),
        sa.Column('screen_width', sa.Integer(), nullable=True),
        sa.Column('screen_height', sa.Integer(), nullable=True),
        sa.Column('language', sa.String(length=10), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_page_visits_page_path'), 'page_visits', ['page_path'], unique=False)
    op.create_index(op.f('ix_page_visits_session_id'), 'page_visits', ['session_id'], unique=False)
    op.create_index(op.f('ix_page_visits_created_at'), 'page_visits', ['created_at'], unique=False)

    op.create_table('active_sessions',
        sa.Column('session_id', sa.String(length=128), nullable=False),
        sa.Column('page_path', sa.String(length=1024), nullable=False),
        sa.Column('country_code', sa.String(length=2), nullable=True),
        sa.Column('country_name', sa.String(length=128), nullable=True),
        sa.Column('device_type', sa.String(length=16), nullable=True),
        sa.Column('last_seen', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('session_id')
    )
    op.create_index(op.f('ix_active_sessions_last_seen'), 'active_sessions', ['last_seen'], unique=False)

    # Back office
    op.create_table('admin_users',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=20), server_default='operator', nullable=False),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email')
    )

    op.create_table('site_settings',
        sa.Column('key', sa.String(length=64), nullable=False),
        sa.Column('value', postgresql.JSONB(), server_default='{}', nullable=False),
        _updated_at(),
        sa.PrimaryKeyConstraint('key')
    )


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_table('site_settings')
    op.drop_table('admin_users')

    op.drop_index(op.f('ix_active_sessions_last_seen'), table_name='active_sessions')
    op.drop_table('active_sessions')
    op.drop_index(op.f('ix_page_visits_created_at'), table_name='page_visits')
    op.drop_index(op.f('ix_page_visits_session_id'), table_name='page_visits')
    op.drop_index(op.f('ix_page_visits_page_path'), table_name='page_visits')
    op.drop_table('page_visits')

    op.drop_index(op.f('ix_ui_translations_category'), table_name='ui_translations')
    op.drop_index(op.f('ix_ui_translations_translation_key'), table_name='ui_translations')
    op.drop_table('ui_translations')
    op.drop_index(op.f('ix_static_page_translations_page_id'), table_name='static_page_translations')
    op.drop_table('static_page_translations')
    op.drop_index(op.f('ix_static_pages_slug'), table_name='static_pages')
    op.drop_table('static_pages')

    op.drop_index(op.f('ix_booking_items_booking_id'), table_name='booking_items')
    op.drop_table('booking_items')
    for column in (
        'created_at', 'stripe_payment_intent_id', 'status', 'customer_email',
        'booking_date', 'availability_id', 'tour_id', 'reference',
    ):
        op.drop_index(op.f(f'ix_bookings_{column}'), table_name='bookings')
    op.drop_table('bookings')
    op.drop_index(op.f('ix_tour_availability_date'), table_name='tour_availability')
    op.drop_index(op.f('ix_tour_availability_tour_id'), table_name='tour_availability')
    op.drop_table('tour_availability')

    op.drop_table('tour_special_label_assignments')
    op.drop_table('tour_category_assignments')
    op.drop_index(op.f('ix_special_labels_slug'), table_name='special_labels')
    op.drop_table('special_labels')
    op.drop_index(op.f('ix_tour_categories_slug'), table_name='tour_categories')
    op.drop_table('tour_categories')

    op.drop_index(op.f('ix_package_upsells_package_id'), table_name='package_upsells')
    op.drop_table('package_upsells')
    op.drop_index(op.f('ix_tour_packages_tour_id'), table_name='tour_packages')
    op.drop_table('tour_packages')
    op.drop_index(op.f('ix_upsell_translations_upsell_id'), table_name='upsell_translations')
    op.drop_table('upsell_translations')
    op.drop_index(op.f('ix_upsells_status'), table_name='upsells')
    op.drop_index(op.f('ix_upsells_tour_id'), table_name='upsells')
    op.drop_table('upsells')
    op.drop_index(op.f('ix_tour_block_translations_block_id'), table_name='tour_block_translations')
    op.drop_table('tour_block_translations')
    op.drop_index(op.f('ix_tour_blocks_tour_id'), table_name='tour_blocks')
    op.drop_table('tour_blocks')
    op.drop_index(op.f('ix_tour_pricing_tour_id'), table_name='tour_pricing')
    op.drop_table('tour_pricing')
    op.drop_index(op.f('ix_tours_status'), table_name='tours')
    op.drop_index(op.f('ix_tours_slug'), table_name='tours')
    op.drop_index(op.f('ix_tours_tour_number'), table_name='tours')
    op.drop_table('tours')
