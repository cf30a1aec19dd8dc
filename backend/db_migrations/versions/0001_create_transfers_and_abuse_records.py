"""create transfers and abuse_records

Revision ID: 0001
Revises:
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "transfers",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("filename", sa.String(), nullable=False),
        sa.Column("content_type", sa.String(), nullable=False),
        sa.Column("size", sa.Integer(), nullable=False),
        sa.Column("storage_handle", sa.String(), nullable=False),
        sa.Column("connection_code", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("download_token", sa.String(), nullable=True),
        sa.Column("token_expires_at", sa.DateTime(), nullable=True),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("uploader_id", sa.String(), nullable=False),
        sa.Column("downloader_id", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_transfers_connection_code", "transfers", ["connection_code"], unique=True)
    op.create_index("ix_transfers_download_token", "transfers", ["download_token"], unique=True)

    op.create_table(
        "abuse_records",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("client_id", sa.String(), nullable=False),
        sa.Column("failure_count", sa.Integer(), nullable=False),
        sa.Column("last_attempt_at", sa.DateTime(), nullable=False),
        sa.Column("block_until", sa.DateTime(), nullable=True),
        sa.Column("last_block_seconds", sa.Integer(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
    )
    op.create_index("ix_abuse_records_client_id", "abuse_records", ["client_id"], unique=True)


def downgrade():
    op.drop_index("ix_abuse_records_client_id", table_name="abuse_records")
    op.drop_table("abuse_records")
    op.drop_index("ix_transfers_download_token", table_name="transfers")
    op.drop_index("ix_transfers_connection_code", table_name="transfers")
    op.drop_table("transfers")
