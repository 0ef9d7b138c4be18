"""create questions

Revision ID: a1c4e2f0b9d1
Revises:
Create Date: 2024-01-08 20:14:52.118406

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "a1c4e2f0b9d1"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "questions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("expression", sa.Text(), nullable=False),
        sa.Column("expected_answer", sa.BigInteger(), nullable=False),
        sa.Column("user_answer", sa.BigInteger(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column("answered_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_questions_created_at", "questions", ["created_at"])
    op.create_index("ix_questions_answered_at", "questions", ["answered_at"])


def downgrade() -> None:
    op.drop_index("ix_questions_answered_at", table_name="questions")
    op.drop_index("ix_questions_created_at", table_name="questions")
    op.drop_table("questions")
