import django.utils.timezone
import uuid6
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="StaffMember",
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
                ("position", models.CharField(max_length=120)),
                (
                    "department",
                    models.CharField(
                        choices=[
                            ("Production", "Production"),
                            ("QA", "Quality Assurance"),
                            ("R&D", "Research & Development"),
                            ("Management", "Management"),
                            ("Logistics", "Logistics"),
                        ],
                        max_length=20,
                    ),
                ),
                ("email", models.EmailField(max_length=254, unique=True)),
                ("phone", models.CharField(blank=True, default="", max_length=32)),
                (
                    "join_date",
                    models.DateField(default=django.utils.timezone.localdate),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("active", "Active"),
                            ("on leave", "On leave"),
                            ("terminated", "Terminated"),
                        ],
                        default="active",
                        max_length=20,
                    ),
                ),
            ],
            options={
                "db_table": "staff_members",
                "ordering": ["name"],
                "indexes": [
                    models.Index(fields=["department"], name="staff_department_idx"),
                    models.Index(fields=["status"], name="staff_status_idx"),
                ],
            },
        ),
    ]
