import django.db.models.deletion
import django.utils.timezone
import simple_history.models
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Order",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "name",
                    models.CharField(
                        blank=True, max_length=100, verbose_name="Customer name"
                    ),
                ),
                (
                    "phone",
                    models.CharField(
                        db_index=True,
                        help_text="Contact number, also required to look the order up",
                        max_length=40,
                        verbose_name="Phone",
                    ),
                ),
                ("quantity", models.PositiveIntegerField(verbose_name="Quantity")),
                (
                    "pickup_slot",
                    models.CharField(max_length=100, verbose_name="Pickup window"),
                ),
                (
                    "depositor_name",
                    models.CharField(
                        help_text="Name the customer will use on the bank transfer",
                        max_length=100,
                        verbose_name="Depositor name",
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending_payment", "Awaiting payment"),
                            ("paid", "Paid"),
                            ("picked_up", "Picked up"),
                        ],
                        db_index=True,
                        default="pending_payment",
                        max_length=20,
                        verbose_name="Status",
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        db_index=True,
                        default=django.utils.timezone.now,
                        editable=False,
                        verbose_name="Created at",
                    ),
                ),
            ],
            options={
                "verbose_name": "Order",
                "verbose_name_plural": "Orders",
                "db_table": "preorder_order",
                "ordering": ["-created_at", "-id"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("quantity__gt", 0)),
                        name="preorder_order_quantity_positive",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("phone", ""), _negated=True),
                        name="preorder_order_phone_required",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("depositor_name", ""), _negated=True),
                        name="preorder_order_depositor_required",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="QuotaLedger",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("day", models.DateField(unique=True, verbose_name="Day")),
                (
                    "admitted",
                    models.PositiveIntegerField(
                        default=0,
                        help_text="Submissions accepted on this day",
                        verbose_name="Admitted",
                    ),
                ),
                (
                    "rejected",
                    models.PositiveIntegerField(
                        default=0,
                        help_text="Submissions refused because the day was full",
                        verbose_name="Rejected",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(auto_now=True, verbose_name="Updated at"),
                ),
            ],
            options={
                "verbose_name": "Quota ledger",
                "verbose_name_plural": "Quota ledgers",
                "db_table": "preorder_quota_ledger",
                "ordering": ["-day"],
            },
        ),
        migrations.CreateModel(
            name="HistoricalOrder",
            fields=[
                (
                    "id",
                    models.BigIntegerField(
                        auto_created=True, blank=True, db_index=True, verbose_name="ID"
                    ),
                ),
                (
                    "name",
                    models.CharField(
                        blank=True, max_length=100, verbose_name="Customer name"
                    ),
                ),
                (
                    "phone",
                    models.CharField(
                        db_index=True,
                        help_text="Contact number, also required to look the order up",
                        max_length=40,
                        verbose_name="Phone",
                    ),
                ),
                ("quantity", models.PositiveIntegerField(verbose_name="Quantity")),
                (
                    "pickup_slot",
                    models.CharField(max_length=100, verbose_name="Pickup window"),
                ),
                (
                    "depositor_name",
                    models.CharField(
                        help_text="Name the customer will use on the bank transfer",
                        max_length=100,
                        verbose_name="Depositor name",
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending_payment", "Awaiting payment"),
                            ("paid", "Paid"),
                            ("picked_up", "Picked up"),
                        ],
                        db_index=True,
                        default="pending_payment",
                        max_length=20,
                        verbose_name="Status",
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        db_index=True,
                        default=django.utils.timezone.now,
                        editable=False,
                        verbose_name="Created at",
                    ),
                ),
                ("history_id", models.AutoField(primary_key=True, serialize=False)),
                ("history_date", models.DateTimeField(db_index=True)),
                ("history_change_reason", models.CharField(max_length=100, null=True)),
                (
                    "history_type",
                    models.CharField(
                        choices=[("+", "Created"), ("~", "Changed"), ("-", "Deleted")],
                        max_length=1,
                    ),
                ),
                (
                    "history_user",
                    models.ForeignKey(
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "historical Order",
                "verbose_name_plural": "historical Orders",
                "ordering": ("-history_date", "-history_id"),
                "get_latest_by": ("history_date", "history_id"),
            },
            bases=(simple_history.models.HistoricalChanges, models.Model),
        ),
    ]
