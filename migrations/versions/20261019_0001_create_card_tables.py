"""Create card and review history tables."""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20261019_0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "cards",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("card_type", sa.String(length=16), server_default=sa.text("'short'"), nullable=False),
        sa.Column("prompt", sa.Text(), nullable=False),
        sa.Column("answer", sa.Text(), nullable=False),
        sa.Column("choices", sa.JSON(), nullable=True),
        sa.Column("easiness_factor", sa.Float(), server_default=sa.text("2.5"), nullable=False),
        sa.Column("interval", sa.Integer(), server_default=sa.text("1"), nullable=False),
        sa.Column("repetition", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column(
            "next_review_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column("version", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            server_onupdate=sa.func.now(),
            nullable=False,
        ),
        sa.CheckConstraint("easiness_factor >= 1.3", name="ck_cards_easiness_floor"),
        sa.CheckConstraint("interval >= 1", name="ck_cards_interval_positive"),
    )
    op.create_index(
        "ix_cards_user_id_next_review_at",
        "cards",
        ("user_id", "next_review_at"),
    )

    op.create_table(
        "card_reviews",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("card_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("quality", sa.Integer(), nullable=False),
        sa.Column(
            "reviewed_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(
            ("card_id",),
            ("cards.id",),
            name="fk_card_reviews_card_id",
            ondelete="CASCADE",
        ),
        sa.CheckConstraint("quality >= 0 AND quality <= 4", name="ck_card_reviews_quality_range"),
    )
    op.create_index("ix_card_reviews_card_id", "card_reviews", ("card_id",))
    op.create_index(
        "ix_card_reviews_user_id_reviewed_at",
        "card_reviews",
        ("user_id", "reviewed_at"),
    )


def downgrade() -> None:
    op.drop_index("ix_card_reviews_user_id_reviewed_at", table_name="card_reviews")
    op.drop_index("ix_card_reviews_card_id", table_name="card_reviews")
    op.drop_table("card_reviews")
    op.drop_index("ix_cards_user_id_next_review_at", table_name="cards")
    op.drop_table("cards")
