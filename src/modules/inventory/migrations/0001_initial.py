import decimal

import django.core.validators
import uuid6
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="InventoryItem",
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
                ("name", models.CharField(max_length=255)),
                (
                    "category",
                    models.CharField(
                        choices=[
                            ("Dye", "Dye"),
                            ("Fabric", "Fabric"),
                            ("Chemical", "Chemical"),
                            ("Equipment", "Equipment"),
                        ],
                        max_length=20,
                    ),
                ),
                (
                    "quantity",
                    models.DecimalField(
                        decimal_places=3,
                        default=decimal.Decimal("0"),
                        max_digits=12,
                        validators=[
                            django.core.validators.MinValueValidator(decimal.Decimal("0"))
                        ],
                    ),
                ),
                ("unit", models.CharField(max_length=32)),
                ("description", models.TextField(blank=True, default="")),
                (
                    "threshold",
                    models.DecimalField(
                        decimal_places=3,
                        default=decimal.Decimal("0"),
                        max_digits=12,
                        validators=[
                            django.core.validators.MinValueValidator(decimal.Decimal("0"))
                        ],
                    ),
                ),
            ],
            options={
                "db_table": "inventory_items",
                "ordering": ["category", "name"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("category", "name"),
                        name="inventory_items_category_name_uniq",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(quantity__gte=0),
                        name="inventory_items_quantity_non_negative",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(threshold__gte=0),
                        name="inventory_items_threshold_non_negative",
                    ),
                ],
            },
        ),
    ]
