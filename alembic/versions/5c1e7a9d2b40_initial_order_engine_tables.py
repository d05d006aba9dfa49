"""initial order engine tables

Revision ID: 5c1e7a9d2b40
Revises:
Create Date: 2026-10-19 10:12:41.508311

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '5c1e7a9d2b40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


ACTOR_ROLE = ("customer", "restaurant", "delivery", "admin")
ORDER_STATUS = (
    "pending", "confirmed", "preparing", "packed", "out_for_delivery",
    "on_the_way", "delivered", "cancelled", "heavy_traffic",
)
PICKUP_STATUS = ("pending", "accepted", "picked", "on_the_way", "delivered", "cancelled")


def _money(name, nullable=False, **kw):
    return sa.Column(name, sa.Numeric(10, 2), nullable=nullable, **kw)


def _rule_columns():
    return [
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def upgrade():
    actor_role = sa.Enum(*ACTOR_ROLE, name="actorrole")
    order_status = sa.Enum(*ORDER_STATUS, name="orderstatus")
    pickup_status = sa.Enum(*PICKUP_STATUS, name="pickupstatus")
    charge_type = sa.Enum("flat", "percentage", name="chargetype")

    op.create_table(
        "user",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("role", actor_role, nullable=False),
        sa.Column("can_login", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_user_email", "user", ["email"])

    op.create_table(
        "product",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("restaurant_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=True),
        sa.Column("name", sa.String(), nullable=False),
        _money("price"),
        _money("discounted_price", nullable=True),
        sa.Column("is_available", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_product_restaurant_id", "product", ["restaurant_id"])

    op.create_table(
        "cartitem",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("product_id", sa.Integer(), sa.ForeignKey("product.id"), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_cartitem_user_id", "cartitem", ["user_id"])

    op.create_table(
        "address",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("full_address", sa.String(), nullable=False),
        sa.Column("landmark", sa.String(), nullable=True),
        sa.Column("city", sa.String(), nullable=False),
        sa.Column("pincode", sa.String(), nullable=False),
        sa.Column("distance_km", sa.Float(), nullable=True),
        sa.Column("is_default", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_address_user_id", "address", ["user_id"])

    op.create_table(
        "offer",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("code", sa.String(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=False),
        sa.Column("discount_type", sa.Enum("flat", "percentage", name="discounttype"), nullable=False),
        _money("discount_value"),
        _money("min_order_value"),
        _money("max_discount", nullable=True),
        sa.Column("valid_from", sa.DateTime(), nullable=False),
        sa.Column("valid_to", sa.DateTime(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("is_public", sa.Boolean(), nullable=False),
        sa.Column("total_usage_limit", sa.Integer(), nullable=True),
        sa.Column("per_customer_limit", sa.Integer(), nullable=False),
        sa.Column("usage_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_offer_code", "offer", ["code"], unique=True)

    op.create_table(
        "offer_redemption",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("offer_id", sa.Integer(), sa.ForeignKey("offer.id"), nullable=False),
        sa.Column("customer_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("count", sa.Integer(), nullable=False),
        sa.Column("last_used_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("offer_id", "customer_id"),
    )
    op.create_index("ix_offer_redemption_offer_id", "offer_redemption", ["offer_id"])
    op.create_index("ix_offer_redemption_customer_id", "offer_redemption", ["customer_id"])

    op.create_table(
        "cart_offer",
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id"), primary_key=True),
        sa.Column("offer_code", sa.String(), nullable=False),
        sa.Column("applied_at", sa.DateTime(), nullable=False),
    )

    # admin-managed pricing rules
    op.create_table(
        "delivery_fee_rule",
        sa.Column("id", sa.Integer(), primary_key=True),
        _money("amount"),
        _money("min_subtotal"),
        _money("max_subtotal", nullable=True),
        *_rule_columns(),
    )
    op.create_table(
        "handling_charge",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        _money("amount"),
        *_rule_columns(),
    )
    op.create_table(
        "gst_tax",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("charge_type", charge_type, nullable=False),
        _money("value"),
        *_rule_columns(),
    )
    op.create_table(
        "delivery_time_rule",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("min_distance", sa.Float(), nullable=False),
        sa.Column("max_distance", sa.Float(), nullable=False),
        sa.Column("min_time", sa.Integer(), nullable=False),
        sa.Column("max_time", sa.Integer(), nullable=False),
        *_rule_columns(),
    )
    for table in ("delivery_fee_rule", "handling_charge", "gst_tax", "delivery_time_rule"):
        op.create_index(f"ix_{table}_is_active", table, ["is_active"])

    op.create_table(
        "system_status",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("status", sa.Enum("online", "maintenance", "offline", name="sitestatus"), nullable=False),
        sa.Column("message", sa.String(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_table(
        "min_cart_amount",
        sa.Column("id", sa.Integer(), primary_key=True),
        _money("amount"),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("updated_by", sa.Integer(), sa.ForeignKey("user.id"), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_table(
        "payment_method",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("code", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("instructions", sa.String(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_payment_method_code", "payment_method", ["code"], unique=True)

    op.create_table(
        "order",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("order_number", sa.String(), nullable=False),
        sa.Column("customer_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("restaurant_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=True),
        sa.Column("delivery_partner_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=True),
        _money("subtotal"),
        _money("delivery_fee"),
        _money("handling_charge"),
        _money("tax"),
        _money("discount"),
        _money("total"),
        sa.Column("payment_method", sa.String(), nullable=False),
        sa.Column("applied_offer_code", sa.String(), nullable=True),
        sa.Column("delivery_address", sa.JSON(), nullable=False),
        sa.Column("estimated_min_time", sa.Integer(), nullable=True),
        sa.Column("estimated_max_time", sa.Integer(), nullable=True),
        sa.Column("status", order_status, nullable=False),
        sa.Column("progress_status", order_status, nullable=False),
        sa.Column("delivered_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_order_order_number", "order", ["order_number"], unique=True)
    op.create_index("ix_order_customer_id", "order", ["customer_id"])
    op.create_index("ix_order_restaurant_id", "order", ["restaurant_id"])
    op.create_index("ix_order_delivery_partner_id", "order", ["delivery_partner_id"])
    op.create_index("ix_order_status", "order", ["status"])

    op.create_table(
        "orderitem",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("order_id", sa.Integer(), sa.ForeignKey("order.id"), nullable=False),
        sa.Column("product_id", sa.Integer(), sa.ForeignKey("product.id"), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        _money("unit_price"),
        sa.Column("quantity", sa.Integer(), nullable=False),
        _money("line_total"),
        sa.Column("review_rating", sa.Integer(), nullable=True),
        sa.Column("review_comment", sa.String(), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_orderitem_order_id", "orderitem", ["order_id"])

    op.create_table(
        "order_status_event",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("order_id", sa.Integer(), sa.ForeignKey("order.id"), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("actor_role", actor_role, nullable=False),
        sa.Column("actor_id", sa.Integer(), nullable=True),
        sa.Column("message", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    # indexes for fast timeline queries
    op.create_index("ix_order_status_event_order_id", "order_status_event", ["order_id"])
    op.create_index("ix_order_status_event_status", "order_status_event", ["status"])

    op.create_table(
        "pickup_job",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("customer_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("delivery_partner_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=True),
        sa.Column("pickup_address", sa.String(), nullable=False),
        sa.Column("drop_address", sa.String(), nullable=False),
        sa.Column(
            "item_type",
            sa.Enum("Lunchbox", "Documents", "Clothes", "Others", name="pickupitemtype"),
            nullable=False,
        ),
        sa.Column("note", sa.String(), nullable=True),
        _money("total_amount", nullable=True),
        sa.Column("status", pickup_status, nullable=False),
        sa.Column("cancel_reason", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_pickup_job_customer_id", "pickup_job", ["customer_id"])
    op.create_index("ix_pickup_job_delivery_partner_id", "pickup_job", ["delivery_partner_id"])
    op.create_index("ix_pickup_job_status", "pickup_job", ["status"])

    op.create_table(
        "pickup_status_event",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("pickup_id", sa.Integer(), sa.ForeignKey("pickup_job.id"), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("actor_role", actor_role, nullable=False),
        sa.Column("actor_id", sa.Integer(), nullable=True),
        sa.Column("message", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_pickup_status_event_pickup_id", "pickup_status_event", ["pickup_id"])
    op.create_index("ix_pickup_status_event_status", "pickup_status_event", ["status"])


def downgrade():
    for table in (
        "pickup_status_event",
        "pickup_job",
        "order_status_event",
        "orderitem",
        "order",
        "payment_method",
        "min_cart_amount",
        "system_status",
        "delivery_time_rule",
        "gst_tax",
        "handling_charge",
        "delivery_fee_rule",
        "cart_offer",
        "offer_redemption",
        "offer",
        "address",
        "cartitem",
        "product",
        "user",
    ):
        op.drop_table(table)

    bind = op.get_bind()
    for enum_name in (
        "pickupitemtype", "pickupstatus", "orderstatus", "sitestatus",
        "chargetype", "discounttype", "actorrole",
    ):
        sa.Enum(name=enum_name).drop(bind, checkfirst=True)
