"""Create land registry tables

Revision ID: 001
Revises: None
Create Date: 2025-01-06 00:00:00.000000+00:00

What:  Creates parcels, parcel_history, parcel_notes, documents and requests
       with their indexes.
How:   Portable column types (sa.Uuid, sa.JSON, timezone-aware DateTime) so
       the revision runs on PostgreSQL and SQLite alike.

Rollback: downgrade() drops every table (destructive, all data lost).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamp(name: str) -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        server_default=sa.text("CURRENT_TIMESTAMP"),
        nullable=False,
    )


def _text(name: str, length: int, default: str = "") -> sa.Column:
    return sa.Column(name, sa.String(length), nullable=False, server_default=sa.text(f"'{default}'"))


def upgrade() -> None:
    op.create_table(
        "parcels",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("reference", sa.String(100), nullable=False, comment="Cadastral reference, unique across the register"),
        _text("parcel_number", 100),
        _text("province", 100),
        _text("territory_or_city", 150),
        _text("commune_or_sector", 150),
        _text("quartier_or_cheflieu", 150),
        _text("avenue", 200),
        sa.Column("gps_lat", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("gps_long", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("area", sa.Float(), nullable=False, comment="Surface in square metres"),
        sa.Column("location", sa.Text(), nullable=True),
        sa.Column("status", sa.String(50), nullable=False),
        _text("land_use", 50, "Résidentiel"),
        _text("certificate_number", 100),
        _text("issuing_authority", 200),
        _text("acquisition_type", 50, "Concession"),
        _text("acquisition_act_ref", 100),
        sa.Column(
            "title_date",
            sa.String(10),
            nullable=False,
            server_default=sa.text("'1970-01-01'"),
            comment="ISO date (YYYY-MM-DD)",
        ),
        sa.Column("owner_name", sa.String(200), nullable=False),
        _text("owner_id_number", 100),
        sa.Column("company_name", sa.String(200), nullable=True),
        sa.Column("rccm", sa.String(100), nullable=True, comment="Trade register number"),
        sa.Column("nif", sa.String(100), nullable=True, comment="Tax identification number"),
        _text("surveying_pv_ref", 100),
        _text("surveyor_name", 200),
        _text("surveyor_license", 100),
        _text("cadastral_plan_ref", 100),
        sa.Column("servitudes", sa.Text(), nullable=True),
        sa.Column("charges", sa.Text(), nullable=True),
        sa.Column("litigation", sa.Text(), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("reference"),
    )
    op.create_index("idx_parcels_status", "parcels", ["status"])
    op.create_index("idx_parcels_created_at", "parcels", [sa.text("created_at DESC")])
    op.create_index("idx_parcels_province", "parcels", ["province"])

    op.create_table(
        "parcel_history",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("parcel_id", sa.Uuid(), nullable=False),
        sa.Column("changes", sa.JSON(), nullable=False),
        sa.Column("changed_by", sa.String(100), nullable=False),
        _timestamp("changed_at"),
        sa.ForeignKeyConstraint(["parcel_id"], ["parcels.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_parcel_history_parcel_changed", "parcel_history", ["parcel_id", "changed_at"])

    op.create_table(
        "parcel_notes",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("parcel_id", sa.Uuid(), nullable=False),
        sa.Column("note", sa.Text(), nullable=False),
        sa.Column("author", sa.String(100), nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.ForeignKeyConstraint(["parcel_id"], ["parcels.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_parcel_notes_parcel_id", "parcel_notes", ["parcel_id"])

    op.create_table(
        "documents",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("parcel_id", sa.Uuid(), nullable=False),
        sa.Column("type", sa.String(100), nullable=False),
        sa.Column("mime", sa.String(100), nullable=False),
        sa.Column("file_path", sa.String(255), nullable=False),
        sa.Column("original_name", sa.String(255), nullable=False, server_default=sa.text("''")),
        sa.Column("size_bytes", sa.Integer(), nullable=False, server_default=sa.text("0")),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["parcel_id"], ["parcels.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_documents_parcel_id", "documents", ["parcel_id"])

    op.create_table(
        "requests",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("citizen_name", sa.String(200), nullable=False),
        sa.Column("parcel_reference", sa.String(100), nullable=False),
        sa.Column("document_type", sa.String(150), nullable=False),
        sa.Column("status", sa.String(50), nullable=False, server_default=sa.text("'En attente'")),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_requests_status", "requests", ["status"])
    op.create_index("idx_requests_parcel_reference", "requests", ["parcel_reference"])


def downgrade() -> None:
    op.drop_index("idx_requests_parcel_reference", table_name="requests")
    op.drop_index("idx_requests_status", table_name="requests")
    op.drop_table("requests")
    op.drop_index("ix_documents_parcel_id", table_name="documents")
    op.drop_table("documents")
    op.drop_index("ix_parcel_notes_parcel_id", table_name="parcel_notes")
    op.drop_table("parcel_notes")
    op.drop_index("idx_parcel_history_parcel_changed", table_name="parcel_history")
    op.drop_table("parcel_history")
    op.drop_index("idx_parcels_province", table_name="parcels")
    op.drop_index("idx_parcels_created_at", table_name="parcels")
    op.drop_index("idx_parcels_status", table_name="parcels")
    op.drop_table("parcels")
