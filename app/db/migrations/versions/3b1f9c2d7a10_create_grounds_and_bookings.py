from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "3b1f9c2d7a10"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    grounds = op.create_table(
        "grounds",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("pricing", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_grounds_id", "grounds", ["id"])
    op.create_index("ix_grounds_name", "grounds", ["name"], unique=True)

    payment_status_enum = sa.Enum(
        "pending",
        "processing",
        "paid",
        "failed",
        name="paymentstatus"
    )

    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("phone", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("ground_id", sa.Integer(), sa.ForeignKey("grounds.id"), nullable=False),
        sa.Column("start_time", sa.DateTime(), nullable=False),
        sa.Column("end_time", sa.DateTime(), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("total_amount", sa.Float(), nullable=False),
        sa.Column("payment_status", payment_status_enum, nullable=False, server_default="pending"),
        sa.Column("payment_attempts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("razorpay_order_id", sa.String(), nullable=True),
        sa.Column("razorpay_payment_id", sa.String(), nullable=True),
        sa.Column("razorpay_signature", sa.String(), nullable=True),
        sa.Column("payment_method", sa.String(), nullable=True),
        sa.Column("payment_completed_at", sa.DateTime(), nullable=True),
        sa.Column("payment_failure_reason", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_bookings_id", "bookings", ["id"])
    op.create_index("ix_bookings_ground_id", "bookings", ["ground_id"])
    op.create_index("ix_bookings_start_time", "bookings", ["start_time"])
    op.create_index("ix_bookings_payment_status", "bookings", ["payment_status"])
    op.create_index("ix_bookings_razorpay_order_id", "bookings", ["razorpay_order_id"])

    # Seed the three grounds (prices per hour, INR)
    op.bulk_insert(
        grounds,
        [
            {
                "name": "G1",
                "pricing": {
                    "Weekday_first_half": 800,
                    "Weekday_second_half": 1000,
                    "Weekend_first_half": 1000,
                    "Weekend_second_half": 1200,
                },
            },
            {
                "name": "G2",
                "pricing": {
                    "Weekday_first_half": 800,
                    "Weekday_second_half": 1000,
                    "Weekend_first_half": 1000,
                    "Weekend_second_half": 1200,
                },
            },
            {
                "name": "Mega_Ground",
                "pricing": {
                    "Weekday_first_half": 1500,
                    "Weekday_second_half": 1800,
                    "Weekend_first_half": 1800,
                    "Weekend_second_half": 2200,
                },
            },
        ],
    )


def downgrade():
    op.drop_table("bookings")
    op.drop_table("grounds")
    op.execute("DROP TYPE IF EXISTS paymentstatus")
