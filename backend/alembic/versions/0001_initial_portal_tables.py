"""Initial portal tables: users, warga, content, audit.

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

from alembic import op
import sqlalchemy as sa


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("nama_lengkap", sa.String(255), nullable=False),
        sa.Column("role", sa.String(32), nullable=False, server_default="warga"),
        sa.Column("rt_akses", sa.String(8)),
        sa.Column("rw_akses", sa.String(8)),
        sa.Column("status_aktif", sa.String(16), server_default="Aktif"),
        sa.Column("subscription_status", sa.String(16), server_default="inactive"),
        sa.Column("subscription_end", sa.String(32)),
        sa.Column("last_login", sa.DateTime()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_users_email", "users", ["email"])

    op.create_table(
        "warga",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("nik", sa.String(32), nullable=False),
        sa.Column("kk", sa.String(32), nullable=False),
        sa.Column("nama", sa.String(255), nullable=False),
        sa.Column("jenis_kelamin", sa.String(32)),
        sa.Column("tempat_lahir", sa.String(100)),
        sa.Column("tanggal_lahir", sa.String(32)),
        sa.Column("alamat", sa.Text()),
        sa.Column("agama", sa.String(32)),
        sa.Column("status_perkawinan", sa.String(32)),
        sa.Column("pekerjaan", sa.String(100)),
        sa.Column("kewarganegaraan", sa.String(32)),
        sa.Column("no_hp", sa.String(32)),
        sa.Column("rt", sa.String(8), nullable=False),
        sa.Column("rw", sa.String(8), nullable=False),
        sa.Column("kelurahan", sa.String(100)),
        sa.Column("kecamatan", sa.String(100)),
        sa.Column("status_aktif", sa.String(16), server_default="Aktif"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_warga_nik", "warga", ["nik"])
    op.create_index("ix_warga_kk", "warga", ["kk"])
    op.create_index("ix_warga_rt", "warga", ["rt"])
    op.create_index("ix_warga_rw", "warga", ["rw"])
    op.create_index("ix_warga_status_aktif", "warga", ["status_aktif"])

    op.create_table(
        "berita",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("judul", sa.String(255), nullable=False),
        sa.Column("konten", sa.Text(), nullable=False),
        sa.Column("kategori", sa.String(64)),
        sa.Column("foto_url", sa.String(500)),
        sa.Column("penulis", sa.String(255)),
        sa.Column("status_publish", sa.String(16), server_default="Pending"),
        sa.Column("views", sa.Integer(), server_default="0"),
        sa.Column("admin_approver", sa.String(255)),
        sa.Column("lembaga_id", sa.Integer()),
        sa.Column("published_at", sa.DateTime()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_berita_status_publish", "berita", ["status_publish"])
    op.create_index("ix_berita_published_at", "berita", ["published_at"])

    op.create_table(
        "umkm",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("nama_usaha", sa.String(255), nullable=False),
        sa.Column("jenis_usaha", sa.String(100)),
        sa.Column("alamat", sa.Text()),
        sa.Column("no_hp", sa.String(32)),
        sa.Column("deskripsi", sa.Text()),
        sa.Column("foto_url", sa.String(500)),
        sa.Column("status_verifikasi", sa.String(16), server_default="pending"),
        sa.Column("admin_approver", sa.String(255)),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_umkm_status_verifikasi", "umkm", ["status_verifikasi"])
    op.create_index("ix_umkm_created_at", "umkm", ["created_at"])

    op.create_table(
        "lembaga_desa",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("nama_lembaga", sa.String(255), nullable=False),
        sa.Column("ketua", sa.String(255)),
        sa.Column("sekretaris", sa.String(255)),
        sa.Column("bendahara", sa.String(255)),
        sa.Column("program_kerja", sa.Text()),
        sa.Column("kontak", sa.String(100)),
        sa.Column("alamat_sekretariat", sa.Text()),
        sa.Column("logo_url", sa.String(500)),
        sa.Column("status_aktif", sa.String(16), server_default="Aktif"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_lembaga_desa_nama_lembaga", "lembaga_desa", ["nama_lembaga"])

    op.create_table(
        "log_aktivitas",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_email", sa.String(255)),
        sa.Column("user_role", sa.String(32)),
        sa.Column("ip_address", sa.String(64)),
        sa.Column("user_agent", sa.String(500)),
        sa.Column("action_type", sa.String(50), nullable=False),
        sa.Column("table_affected", sa.String(50)),
        sa.Column("record_id", sa.String(64)),
        sa.Column("old_data", sa.Text()),
        sa.Column("new_data", sa.Text()),
        sa.Column("timestamp", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_log_aktivitas_user_email", "log_aktivitas", ["user_email"])
    op.create_index("ix_log_aktivitas_action_type", "log_aktivitas", ["action_type"])
    op.create_index("ix_log_aktivitas_timestamp", "log_aktivitas", ["timestamp"])

    op.create_table(
        "blokir_attempts",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("ip_address", sa.String(64), nullable=False, unique=True),
        sa.Column("nik_attempted", sa.String(32)),
        sa.Column("kk_attempted", sa.String(32)),
        sa.Column("failed_count", sa.Integer(), server_default="0"),
        sa.Column("total_blocks", sa.Integer(), server_default="0"),
        sa.Column("status", sa.String(16), server_default="monitoring"),
        sa.Column("blocked_until", sa.DateTime()),
        sa.Column("first_attempt", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("last_attempt", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_blokir_attempts_last_attempt", "blokir_attempts", ["last_attempt"])


def downgrade() -> None:
    op.drop_table("blokir_attempts")
    op.drop_table("log_aktivitas")
    op.drop_table("lembaga_desa")
    op.drop_table("umkm")
    op.drop_table("berita")
    op.drop_table("warga")
    op.drop_table("users")
