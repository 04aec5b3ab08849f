"""create logbook schema"""

from alembic import op
import sqlalchemy as sa

revision = "0001_create_logbook_schema"
down_revision = None
branch_labels = None
depends_on = None


def _lookup(name: str, pk: str, *extra: sa.Column) -> None:
    op.create_table(
        name,
        sa.Column(pk, sa.Integer, primary_key=True),
        sa.Column("name", sa.String(length=128), nullable=False, index=True),
        *extra,
    )


def upgrade() -> None:
    _lookup("camera", "camera_id")
    _lookup("mount", "mount_id")
    _lookup("location", "location_id")
    _lookup("telescope", "telescope_id", sa.Column("notes", sa.Text, nullable=True))
    op.create_table(
        "filter",
        sa.Column("filter_id", sa.Integer, primary_key=True),
        sa.Column("name", sa.String(length=64), nullable=False, index=True),
        sa.Column("sort_order", sa.Integer, nullable=True),
    )
    op.create_table(
        "object_catalog",
        sa.Column("object_id", sa.Integer, primary_key=True),
        sa.Column("catalog_no", sa.String(length=64), nullable=False, index=True),
        sa.Column("description", sa.Text, nullable=True),
    )
    op.create_table(
        "target",
        sa.Column("target_id", sa.Integer, primary_key=True),
        sa.Column("catalog_no", sa.String(length=64), nullable=False, unique=True, index=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
    )
    op.create_table(
        "session",
        sa.Column("session_id", sa.Integer, primary_key=True),
        sa.Column(
            "target_id",
            sa.Integer,
            sa.ForeignKey("target.target_id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("session_date", sa.Date, nullable=True, index=True),
        sa.Column("telescope_id", sa.Integer, sa.ForeignKey("telescope.telescope_id", ondelete="SET NULL")),
        sa.Column("mount_id", sa.Integer, sa.ForeignKey("mount.mount_id", ondelete="SET NULL")),
        sa.Column("camera_id", sa.Integer, sa.ForeignKey("camera.camera_id", ondelete="SET NULL")),
        sa.Column("location_id", sa.Integer, sa.ForeignKey("location.location_id", ondelete="SET NULL")),
        sa.Column("notes", sa.Text, nullable=True),
    )
    op.create_table(
        "image_run",
        sa.Column("image_run_id", sa.Integer, primary_key=True),
        sa.Column(
            "session_id",
            sa.Integer,
            sa.ForeignKey("session.session_id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("run_date", sa.Date, nullable=True, index=True),
        sa.Column("panel_no", sa.Integer, nullable=True),
        sa.Column("panel_name", sa.String(length=128), nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
    )
    op.create_table(
        "run_filter",
        sa.Column("run_filter_id", sa.Integer, primary_key=True),
        sa.Column(
            "image_run_id",
            sa.Integer,
            sa.ForeignKey("image_run.image_run_id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("filter_id", sa.Integer, sa.ForeignKey("filter.filter_id"), nullable=False),
        sa.Column("exposures", sa.Integer, nullable=False, server_default="0"),
        sa.Column("exposure_sec", sa.Float, nullable=False, server_default="0"),
        sa.Column("gain", sa.Integer, nullable=True),
        sa.Column("camera_offset", sa.Integer, nullable=True),
        sa.Column("bin", sa.Integer, nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
        sa.CheckConstraint("exposures >= 0", name="ck_run_filter_exposures_nonneg"),
        sa.CheckConstraint("exposure_sec >= 0", name="ck_run_filter_exposure_sec_nonneg"),
    )


def downgrade() -> None:
    for table in (
        "run_filter",
        "image_run",
        "session",
        "target",
        "object_catalog",
        "filter",
        "telescope",
        "location",
        "mount",
        "camera",
    ):
        op.drop_table(table)
