"""initial schema

Catalog, promotions, promo codes, settings, rate limit entries and logs.

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op


revision: str = "0001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _money(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(name, sa.Numeric(10, 2), nullable=nullable)


def upgrade() -> None:
    op.create_table(
        "product",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("slug", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        _money("monthly_price"),
        _money("monthly_price_12", nullable=True),
        _money("setup_fee"),
        sa.Column("contract_months", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_product_slug", "product", ["slug"], unique=True)

    op.create_table(
        "productoption",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("slug", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("category", sa.String(length=16), nullable=False),
        _money("monthly_price"),
        _money("one_time_price"),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_productoption_slug", "productoption", ["slug"], unique=True)

    op.create_table(
        "promotion",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("code", sa.String(length=64), nullable=True),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("customer_type", sa.String(length=32), nullable=False),
        sa.Column("is_global", sa.Boolean(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("start_date", sa.DateTime(), nullable=True),
        sa.Column("end_date", sa.DateTime(), nullable=True),
        sa.Column("requires_customer_number", sa.Boolean(), nullable=False),
        sa.Column("available_text", sa.String(), nullable=True),
        sa.Column("unavailable_text", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_promotion_code", "promotion", ["code"])
    op.create_index("ix_promotion_is_active", "promotion", ["is_active"])

    op.create_table(
        "promotiondiscount",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("promotion_id", sa.Integer(), sa.ForeignKey("promotion.id"), nullable=False),
        sa.Column("applies_to", sa.String(length=16), nullable=False),
        sa.Column("discount_type", sa.String(length=16), nullable=False),
        _money("discount_amount", nullable=True),
        sa.Column("price_type", sa.String(length=16), nullable=False),
        sa.Column("discount_duration_months", sa.Integer(), nullable=True),
        sa.Column("target_product_id", sa.Integer(), nullable=True),
        sa.Column("target_option_id", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_promotiondiscount_promotion_id", "promotiondiscount", ["promotion_id"])
    op.create_index("ix_promotiondiscount_target_product_id", "promotiondiscount", ["target_product_id"])
    op.create_index("ix_promotiondiscount_target_option_id", "promotiondiscount", ["target_option_id"])

    op.create_table(
        "promotionbuilding",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("promotion_id", sa.Integer(), sa.ForeignKey("promotion.id"), nullable=False),
        sa.Column("building_id", sa.String(length=64), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_promotionbuilding_promotion_id", "promotionbuilding", ["promotion_id"])
    op.create_index("ix_promotionbuilding_building_id", "promotionbuilding", ["building_id"])

    op.create_table(
        "promocode",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("code", sa.String(length=64), nullable=False),
        sa.Column("description", sa.String(), nullable=False),
        sa.Column("valid_streets", sa.String(length=512), nullable=True),
        _money("router_discount"),
        sa.Column("setup_fee_waived", sa.Boolean(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("valid_from", sa.Date(), nullable=True),
        sa.Column("valid_until", sa.Date(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_promocode_code", "promocode", ["code"], unique=True)

    op.create_table(
        "appsetting",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("key", sa.String(length=64), nullable=False),
        sa.Column("value", sa.JSON(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_appsetting_key", "appsetting", ["key"], unique=True)

    op.create_table(
        "ratelimitentry",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("ip_address", sa.String(length=64), nullable=False),
        sa.Column("action_type", sa.String(length=32), nullable=False),
        sa.Column("attempts", sa.Integer(), nullable=False),
        sa.Column("first_attempt_at", sa.DateTime(), nullable=False),
        sa.Column("last_attempt_at", sa.DateTime(), nullable=False),
        sa.Column("blocked_until", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_ratelimitentry_ip_address", "ratelimitentry", ["ip_address"])
    op.create_index("ix_ratelimitentry_action_type", "ratelimitentry", ["action_type"])

    op.create_table(
        "security_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("event", sa.String(), nullable=False),
        sa.Column("action_type", sa.String(length=32), nullable=True),
        sa.Column("ip", sa.String(), nullable=True),
        sa.Column("endpoint", sa.String(), nullable=True),
        sa.Column("detail", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_security_logs_event", "security_logs", ["event"])

    op.create_table(
        "error_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("endpoint", sa.String(), nullable=True),
        sa.Column("method", sa.String(), nullable=True),
        sa.Column("error_message", sa.String(), nullable=True),
        sa.Column("stack_trace", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )


def downgrade() -> None:
    for table in (
        "error_logs",
        "security_logs",
        "ratelimitentry",
        "appsetting",
        "promocode",
        "promotionbuilding",
        "promotiondiscount",
        "promotion",
        "productoption",
        "product",
    ):
        op.drop_table(table)
