"""Initial schema: users, categories, products, banners and revoked tokens.

Revision ID: 20251019000000
Revises:
Create Date: 2025-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "20251019000000"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("first_name", sa.String(length=50), nullable=True),
        sa.Column("last_name", sa.String(length=50), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=32), nullable=False, server_default="CLIENT_ROLE"),
        sa.Column("token", sa.Text(), nullable=True),
        sa.Column("connected_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("disconnected_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)

    op.create_table(
        "categorias",
        sa.Column("id_cat", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("nombre", sa.String(length=150), nullable=False),
        sa.PrimaryKeyConstraint("id_cat"),
        sa.UniqueConstraint("nombre"),
    )

    op.create_table(
        "productos",
        sa.Column("id_producto", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("nombre", sa.String(length=255), nullable=False),
        sa.Column("descripcion", sa.Text(), nullable=True),
        sa.Column("id_categoria", sa.Integer(), nullable=False),
        sa.Column("stock", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("precio", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("marca", sa.String(length=100), nullable=True),
        sa.Column("modelo", sa.String(length=100), nullable=True),
        sa.Column("caracteristicas", sa.Text(), nullable=True),
        sa.Column("codigo_interno", sa.String(length=100), nullable=True),
        sa.Column("imagen_principal", sa.JSON(), nullable=False),
        sa.Column("video_url", sa.String(length=1024), nullable=True),
        sa.Column("favorito", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("activo", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "fecha_creacion",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column("fecha_actualizacion", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["id_categoria"], ["categorias.id_cat"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id_producto"),
    )
    op.create_index(op.f("ix_productos_id_categoria"), "productos", ["id_categoria"], unique=False)

    op.create_table(
        "banners",
        sa.Column("id_banner", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("banner", sa.String(length=1024), nullable=False),
        sa.Column(
            "fecha_creacion",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id_banner"),
    )

    op.create_table(
        "revoked_tokens",
        sa.Column("fingerprint", sa.String(length=64), nullable=False),
        sa.Column("expires_at", sa.BigInteger(), nullable=False),
        sa.Column(
            "revoked_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("fingerprint"),
    )
    op.create_index(op.f("ix_revoked_tokens_expires_at"), "revoked_tokens", ["expires_at"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_revoked_tokens_expires_at"), table_name="revoked_tokens")
    op.drop_table("revoked_tokens")
    op.drop_table("banners")
    op.drop_index(op.f("ix_productos_id_categoria"), table_name="productos")
    op.drop_table("productos")
    op.drop_table("categorias")
    op.drop_index(op.f("ix_users_email"), table_name="users")
    op.drop_table("users")
