import django.core.validators
import django.db.models.deletion
import uuid6
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models

STATUS_CHOICES = [
    ("pending_price", "En attente de prix"),
    ("pending_advance", "En attente d'acompte"),
    ("advance_paid", "Acompte payé"),
    ("in_production", "En production"),
    ("ready", "Prêt"),
    ("shipped", "Expédié"),
    ("delivered", "Livré"),
    ("cancelled", "Annulé"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("customers", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Order",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid6.uuid7,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "tracking_number",
                    models.CharField(editable=False, max_length=32, unique=True),
                ),
                (
                    "status",
                    models.CharField(
                        choices=STATUS_CHOICES,
                        default="pending_price",
                        max_length=20,
                    ),
                ),
                ("product_name", models.CharField(max_length=255)),
                (
                    "quantity",
                    models.PositiveIntegerField(
                        default=1,
                        validators=[django.core.validators.MinValueValidator(1)],
                    ),
                ),
                ("technical_details", models.TextField(blank=True, default="")),
                ("comments", models.TextField(blank=True, default="")),
                (
                    "total_price",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        max_digits=12,
                        null=True,
                        validators=[
                            django.core.validators.MinValueValidator(Decimal("0.00"))
                        ],
                    ),
                ),
                (
                    "advance_percentage",
                    models.PositiveSmallIntegerField(
                        blank=True,
                        null=True,
                        validators=[django.core.validators.MaxValueValidator(100)],
                    ),
                ),
                ("advance_paid", models.BooleanField(default=False)),
                (
                    "customer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="orders",
                        to="customers.customer",
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="orders_created",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "orders",
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["status"], name="orders_status_idx"),
                    models.Index(fields=["-created_at"], name="orders_created_idx"),
                    models.Index(
                        fields=["created_by", "-created_at"], name="orders_creator_idx"
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("quantity__gte", 1)),
                        name="orders_quantity_positive",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            ("total_price__isnull", True),
                            ("total_price__gte", 0),
                            _connector="OR",
                        ),
                        name="orders_total_price_non_negative",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            ("advance_percentage__isnull", True),
                            ("advance_percentage__lte", 100),
                            _connector="OR",
                        ),
                        name="orders_advance_percentage_range",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="OrderHistory",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid6.uuid7,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "status",
                    models.CharField(choices=STATUS_CHOICES, max_length=20),
                ),
                (
                    "comment",
                    models.TextField(blank=True, default=None, null=True),
                ),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="history",
                        to="orders.order",
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="order_history_entries",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "order_history",
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(
                        fields=["order", "-created_at"],
                        name="order_history_order_idx",
                    ),
                ],
            },
        ),
    ]
