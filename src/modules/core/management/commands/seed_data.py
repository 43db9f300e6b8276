from __future__ import annotations

import random
from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from modules.inventory.models import InventoryCategory, InventoryItem
from modules.orders import engine
from modules.orders.constants import FABRIC_PRICING, NORMAL_FLOW, OrderStatus
from modules.orders.models import Order
from modules.orders.repositories import OrderDjangoRepository
from modules.staff.models import Department, StaffMember, StaffStatus

CUSTOMERS = [
    ("ana", "Ana", "Souza"),
    ("bruno", "Bruno", "Lima"),
    ("carla", "Carla", "Mendes"),
]

COLORS = ["Indigo", "Crimson", "Saffron", "Emerald", "Charcoal", "Ivory"]


class Command(BaseCommand):
    help = "Seed database with realistic development data."

    def add_arguments(self, parser):
        parser.add_argument("--orders", type=int, default=30)

    @transaction.atomic
    def handle(self, *args, **options):
        random.seed(42)
        self.stdout.write("Seeding development data...")

        users_created, customer_names = self._seed_users()
        items = self._seed_inventory()
        staff = self._seed_staff()
        orders_created = self._seed_orders(customer_names, options["orders"])

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"users={users_created}, "
                f"inventory={len(items)}, "
                f"staff={len(staff)}, "
                f"orders={orders_created}"
            )
        )

    def _seed_users(self) -> tuple[int, list[str]]:
        User = get_user_model()
        created = 0
        if not User.objects.filter(username="admin").exists():
            User.objects.create_superuser("admin", password="admin123")
            created += 1
        names = []
        for username, first_name, last_name in CUSTOMERS:
            user, was_created = User.objects.get_or_create(
                username=username,
                defaults={"first_name": first_name, "last_name": last_name},
            )
            if was_created:
                user.set_password(f"{username}123")
                user.save()
                created += 1
            names.append(user.get_full_name() or user.get_username())
        return created, names

    def _seed_inventory(self) -> list[InventoryItem]:
        self.stdout.write("Creating inventory...")
        catalog = [
            ("Reactive Red 195", InventoryCategory.DYE, "kg", "120", "25"),
            ("Indigo Paste", InventoryCategory.DYE, "kg", "18", "20"),
            ("Disperse Blue 79", InventoryCategory.DYE, "kg", "64", "15"),
            ("Cotton Greige", InventoryCategory.FABRIC, "meters", "2400", "500"),
            ("Silk Habotai", InventoryCategory.FABRIC, "meters", "180", "200"),
            ("Soda Ash", InventoryCategory.CHEMICAL, "kg", "300", "50"),
            ("Glauber Salt", InventoryCategory.CHEMICAL, "kg", "40", "60"),
            ("Jet Dyeing Machine", InventoryCategory.EQUIPMENT, "units", "3", "1"),
        ]
        items: list[InventoryItem] = []
        for name, category, unit, quantity, threshold in catalog:
            item, _ = InventoryItem.objects.get_or_create(
                name=name,
                category=category,
                defaults={
                    "unit": unit,
                    "quantity": Decimal(quantity),
                    "threshold": Decimal(threshold),
                },
            )
            items.append(item)
        self.stdout.write(self.style.SUCCESS("Creating inventory... Done!"))
        return items

    def _seed_staff(self) -> list[StaffMember]:
        self.stdout.write("Creating staff...")
        roster = [
            ("Marta Oliveira", "Dye House Supervisor", Department.PRODUCTION, StaffStatus.ACTIVE),
            ("Rafael Costa", "Colorist", Department.RND, StaffStatus.ACTIVE),
            ("Lucia Ferreira", "QA Analyst", Department.QA, StaffStatus.ON_LEAVE),
            ("Paulo Santos", "Plant Manager", Department.MANAGEMENT, StaffStatus.ACTIVE),
            ("Igor Ramos", "Dispatcher", Department.LOGISTICS, StaffStatus.TERMINATED),
        ]
        staff: list[StaffMember] = []
        for name, position, department, status in roster:
            email = f"{name.split()[0].lower()}@dyehouse.example.com"
            member, _ = StaffMember.objects.get_or_create(
                email=email,
                defaults={
                    "name": name,
                    "position": position,
                    "department": department,
                    "status": status,
                },
            )
            staff.append(member)
        self.stdout.write(self.style.SUCCESS("Creating staff... Done!"))
        return staff

    def _seed_orders(self, customer_names: list[str], count: int) -> int:
        self.stdout.write("Creating orders...")
        repository = OrderDjangoRepository()
        fabrics = [*FABRIC_PRICING, "Hemp"]
        created = 0

        for i in range(count):
            notes = f"Seed order {i + 1}"
            if Order.objects.filter(notes=notes).exists():
                continue

            placed_at = timezone.now() - timedelta(days=random.randint(1, 120))
            order = engine.create_order(
                random.choice(customer_names),
                [
                    {
                        "fabric": random.choice(fabrics),
                        "color": random.choice(COLORS),
                        "quantity": Decimal(random.randint(5, 250)),
                    }
                    for _ in range(random.randint(1, 3))
                ],
                notes=notes,
                now=placed_at,
            )

            # Walk part of the normal flow, occasionally cancelling.
            moment = placed_at
            for status in NORMAL_FLOW[1 : random.randint(1, len(NORMAL_FLOW))]:
                moment += timedelta(days=random.randint(1, 4))
                engine.update_status(order, status, now=moment)
            if not order.is_terminal and random.random() < 0.15:
                moment += timedelta(hours=random.randint(1, 48))
                engine.update_status(order, OrderStatus.CANCELLED, "Cancelled by customer", now=moment)

            repository.insert(order)
            created += 1

        self.stdout.write(self.style.SUCCESS("Creating orders... Done!"))
        return created
