"""create_library_tables

Revision ID: 3b9c1f2a7d40
Revises:
Create Date: 2026-10-19 10:12:31.408215

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3b9c1f2a7d40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'images',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('uid', sa.String(), nullable=False),
        sa.Column('s3_bucket', sa.String(), nullable=True),
        sa.Column('s3_key', sa.String(), nullable=False),
        sa.Column('bytes', sa.BigInteger(), nullable=True),
        sa.Column('width', sa.Integer(), nullable=True),
        sa.Column('height', sa.Integer(), nullable=True),
        sa.Column('format', sa.String(), nullable=True),
        sa.Column('status', sa.String(), nullable=True),
        sa.Column('nsfw', sa.Boolean(), nullable=True),
        sa.Column('liked', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('caption', sa.Text(), nullable=True),
        sa.Column('tagged', sa.Boolean(), nullable=True),
        sa.Column('last_tagged_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('uid'),
    )
    op.create_index(op.f('ix_images_id'), 'images', ['id'], unique=False)
    op.create_index(op.f('ix_images_status'), 'images', ['status'], unique=False)
    op.create_index(op.f('ix_images_created_at'), 'images', ['created_at'], unique=False)

    # Trigram index keeps ILIKE '%token%' searches on filenames and captions usable
    op.execute("CREATE EXTENSION IF NOT EXISTS pg_trgm")
    op.execute("CREATE INDEX ix_images_s3_key_trgm ON images USING gin (s3_key gin_trgm_ops)")
    op.execute("CREATE INDEX ix_images_caption_trgm ON images USING gin (caption gin_trgm_ops)")

    op.create_table(
        'image_tags',
        sa.Column('image_id', sa.Integer(), nullable=False),
        sa.Column('tag', sa.String(), nullable=False),
        sa.ForeignKeyConstraint(['image_id'], ['images.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('image_id', 'tag'),
    )
    op.create_index(op.f('ix_image_tags_tag'), 'image_tags', ['tag'], unique=False)

    op.create_table(
        'collections',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_collections_id'), 'collections', ['id'], unique=False)
    op.create_index(op.f('ix_collections_name'), 'collections', ['name'], unique=False)

    op.create_table(
        'collection_images',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('collection_id', sa.Integer(), nullable=False),
        sa.Column('image_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['collection_id'], ['collections.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['image_id'], ['images.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('collection_id', 'image_id', name='uq_collection_images_pair'),
    )
    op.create_index(op.f('ix_collection_images_collection_id'), 'collection_images', ['collection_id'], unique=False)
    op.create_index(op.f('ix_collection_images_image_id'), 'collection_images', ['image_id'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_collection_images_image_id'), table_name='collection_images')
    op.drop_index(op.f('ix_collection_images_collection_id'), table_name='collection_images')
    op.drop_table('collection_images')

    op.drop_index(op.f('ix_collections_name'), table_name='collections')
    op.drop_index(op.f('ix_collections_id'), table_name='collections')
    op.drop_table('collections')

    op.drop_index(op.f('ix_image_tags_tag'), table_name='image_tags')
    op.drop_table('image_tags')

    op.execute("DROP INDEX IF EXISTS ix_images_caption_trgm")
    op.execute("DROP INDEX IF EXISTS ix_images_s3_key_trgm")
    op.drop_index(op.f('ix_images_created_at'), table_name='images')
    op.drop_index(op.f('ix_images_status'), table_name='images')
    op.drop_index(op.f('ix_images_id'), table_name='images')
    op.drop_table('images')
