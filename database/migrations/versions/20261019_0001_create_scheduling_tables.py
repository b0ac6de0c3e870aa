"""create scheduling tables

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "time_slots",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("start_time", sa.String(length=5), nullable=False),
        sa.Column("end_time", sa.String(length=5), nullable=False),
        sa.Column("display_order", sa.Integer(), nullable=False),
    )
    op.create_index("ix_time_slots_display_order", "time_slots", ["display_order"], unique=True)

    op.create_table(
        "teachers",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("availability", sa.JSON(), nullable=False),
        sa.Column("color_keyword", sa.String(length=50), nullable=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_teachers_date_active", "teachers", ["date", "is_active"])

    op.create_table(
        "students",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("english_name", sa.String(length=200), nullable=True),
        sa.Column("availability", sa.JSON(), nullable=False),
        sa.Column("color_keyword", sa.String(length=50), nullable=True),
        sa.Column("weakness_level", sa.String(length=100), nullable=True),
        sa.Column("teacher_notes", sa.Text(), nullable=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_students_date_active", "students", ["date", "is_active"])

    op.create_table(
        "assignments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("time_slot_id", sa.Integer(), sa.ForeignKey("time_slots.id"), nullable=False),
        sa.Column("room_id", sa.Integer(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("subject", sa.String(length=200), nullable=True),
        sa.Column("color_keyword", sa.String(length=50), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_assignments_date_slot_active", "assignments", ["date", "time_slot_id", "is_active"])

    op.create_table(
        "assignment_teachers",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column(
            "assignment_id",
            sa.Integer(),
            sa.ForeignKey("assignments.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("teacher_id", sa.Integer(), sa.ForeignKey("teachers.id"), nullable=False),
        sa.Column("is_substitute", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("time_slot_id", sa.Integer(), nullable=False),
        sa.Column("is_booked", sa.Boolean(), nullable=False, server_default=sa.text("true")),
    )
    op.create_index("ix_assignment_teachers_assignment_id", "assignment_teachers", ["assignment_id"])
    op.create_index("ix_assignment_teachers_teacher_id", "assignment_teachers", ["teacher_id"])
    op.create_index(
        "uq_assignment_teachers_booking",
        "assignment_teachers",
        ["date", "time_slot_id", "teacher_id"],
        unique=True,
        postgresql_where=sa.text("is_booked"),
        sqlite_where=sa.text("is_booked = 1"),
    )

    op.create_table(
        "assignment_students",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column(
            "assignment_id",
            sa.Integer(),
            sa.ForeignKey("assignments.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("student_id", sa.Integer(), sa.ForeignKey("students.id"), nullable=False),
        sa.Column("submission_id", sa.String(length=100), nullable=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("time_slot_id", sa.Integer(), nullable=False),
        sa.Column("is_booked", sa.Boolean(), nullable=False, server_default=sa.text("true")),
    )
    op.create_index("ix_assignment_students_assignment_id", "assignment_students", ["assignment_id"])
    op.create_index("ix_assignment_students_student_id", "assignment_students", ["student_id"])
    op.create_index(
        "uq_assignment_students_booking",
        "assignment_students",
        ["date", "time_slot_id", "student_id"],
        unique=True,
        postgresql_where=sa.text("is_booked"),
        sqlite_where=sa.text("is_booked = 1"),
    )


def downgrade() -> None:
    op.drop_index("uq_assignment_students_booking", table_name="assignment_students")
    op.drop_index("ix_assignment_students_student_id", table_name="assignment_students")
    op.drop_index("ix_assignment_students_assignment_id", table_name="assignment_students")
    op.drop_table("assignment_students")

    op.drop_index("uq_assignment_teachers_booking", table_name="assignment_teachers")
    op.drop_index("ix_assignment_teachers_teacher_id", table_name="assignment_teachers")
    op.drop_index("ix_assignment_teachers_assignment_id", table_name="assignment_teachers")
    op.drop_table("assignment_teachers")

    op.drop_index("ix_assignments_date_slot_active", table_name="assignments")
    op.drop_table("assignments")

    op.drop_index("ix_students_date_active", table_name="students")
    op.drop_table("students")

    op.drop_index("ix_teachers_date_active", table_name="teachers")
    op.drop_table("teachers")

    op.drop_index("ix_time_slots_display_order", table_name="time_slots")
    op.drop_table("time_slots")
