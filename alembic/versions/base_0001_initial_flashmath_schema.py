"""initial flashmath schema

Revision ID: base_0001
Revises:
Create Date: 2026-10-19 10:12:41.118203

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "base_0001"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "students",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("age", sa.Integer(), nullable=False),
        sa.Column("classroom", sa.String(length=16), nullable=False),
        sa.Column("flash_speed", sa.Float(), nullable=False),
        sa.Column("response_time", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_students_name", "students", ["name"], unique=True)

    op.create_table(
        "exercise_chunks",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("level", sa.String(length=16), nullable=False),
        sa.Column("group_name", sa.String(length=200), nullable=False),
        sa.Column("chunk_number", sa.Integer(), nullable=False),
        sa.Column("total_chunks", sa.Integer(), nullable=False),
        sa.Column("total_questions", sa.Integer(), nullable=False),
        sa.Column("questions", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_exercise_chunks_level", "exercise_chunks", ["level"])

    op.create_table(
        "progress",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("student_id", sa.Integer(), nullable=False),
        sa.Column("level", sa.String(length=16), nullable=False),
        sa.Column("exercise_group", sa.String(length=200), nullable=False),
        sa.Column("question_id", sa.Integer(), nullable=False),
        sa.Column("response", sa.String(length=100), nullable=False),
        sa.Column("is_correct", sa.Boolean(), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_progress_student_id", "progress", ["student_id"])

    op.create_table(
        "csv_files",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("file_name", sa.String(length=255), nullable=False),
        sa.Column("level", sa.String(length=16), nullable=False),
        sa.Column("uploaded_by", sa.String(length=120), nullable=False),
        sa.Column("uploaded_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("group_count", sa.Integer(), nullable=False),
        sa.Column("question_count", sa.Integer(), nullable=False),
    )
    op.create_index("ix_csv_files_uploaded_at", "csv_files", ["uploaded_at"])


def downgrade() -> None:
    op.drop_index("ix_csv_files_uploaded_at", table_name="csv_files")
    op.drop_table("csv_files")
    op.drop_index("ix_progress_student_id", table_name="progress")
    op.drop_table("progress")
    op.drop_index("ix_exercise_chunks_level", table_name="exercise_chunks")
    op.drop_table("exercise_chunks")
    op.drop_index("ix_students_name", table_name="students")
    op.drop_table("students")
