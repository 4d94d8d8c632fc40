from __future__ import annotations

import random
from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from modules.customers.models import Customer
from modules.customers.repositories.django_repository import CustomerDjangoRepository
from modules.identity.constants import Role
from modules.identity.context import CallerContext
from modules.identity.models import Profile
from modules.orders.constants import NOMINAL_PROGRESSION, OrderStatus
from modules.orders.dtos import CreateOrderDTO, UpdateOrderDTO
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService

SEED_CUSTOMERS = [
    ("Camille", "Martin", "camille.martin@example.com", "06 12 34 56 78"),
    ("Lucas", "Bernard", "lucas.bernard@example.com", "06 23 45 67 89"),
    ("Léa", "Dubois", "lea.dubois@example.com", ""),
    ("Hugo", "Thomas", "", "07 34 56 78 90"),
    ("Chloé", "Robert", "chloe.robert@example.com", "06 45 67 89 01"),
    ("Louis", "Richard", "louis.richard@example.com", ""),
    ("Manon", "Petit", "manon.petit@example.com", "07 56 78 90 12"),
    ("Jules", "Durand", "", ""),
]

SEED_PRODUCTS = [
    "Caisse bois sur mesure",
    "Palette renforcée",
    "Conteneur isotherme",
    "Emballage export",
    "Cadre métallique",
    "Housse de protection",
]


class Command(BaseCommand):
    help = "Seed the database with development users, customers and orders."

    def add_arguments(self, parser):
        parser.add_argument("--orders", type=int, default=30)

    def handle(self, *args, **options):
        random.seed(42)
        self.stdout.write("Seeding development data...")

        admin, employee = self._seed_users()
        customers = self._seed_customers(admin)
        orders_created = self._seed_orders(customers, admin, employee, options["orders"])

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"customers={len(customers)}, "
                f"orders={orders_created}"
            )
        )

    def _seed_users(self):
        User = get_user_model()
        admin = User.objects.filter(username="admin").first()
        if admin is None:
            admin = User.objects.create_superuser("admin", password="admin123")
        employee = User.objects.filter(username="employe").first()
        if employee is None:
            employee = User.objects.create_user("employe", password="employe123")
        Profile.objects.update_or_create(user=admin, defaults={"role": Role.ADMIN})
        Profile.objects.update_or_create(user=employee, defaults={"role": Role.EMPLOYEE})
        return admin, employee

    def _seed_customers(self, creator) -> list[Customer]:
        self.stdout.write("Creating customers...")
        customers: list[Customer] = []
        for first_name, last_name, email, phone in SEED_CUSTOMERS:
            customer, _ = Customer.objects.get_or_create(
                first_name=first_name,
                last_name=last_name,
                defaults={"email": email, "phone": phone, "created_by": creator},
            )
            customers.append(customer)
        self.stdout.write(self.style.SUCCESS("Creating customers... Done!"))
        return customers

    def _seed_orders(self, customers, admin, employee, count: int) -> int:
        if Order.objects.exists():
            self.stdout.write(self.style.WARNING("Skipping orders (already seeded)."))
            return 0

        self.stdout.write("Creating orders...")
        service = OrderService(
            order_repository=OrderDjangoRepository(),
            customer_repository=CustomerDjangoRepository(),
        )
        admin_caller = CallerContext(user_id=admin.pk, role=Role.ADMIN)
        statuses = [*NOMINAL_PROGRESSION, OrderStatus.CANCELLED]

        for _ in range(count):
            creator = random.choice([admin, employee])
            with transaction.atomic():
                order = service.create_order(
                    CreateOrderDTO(
                        customer_id=random.choice(customers).id,
                        product_name=random.choice(SEED_PRODUCTS),
                        quantity=random.randint(1, 12),
                    ),
                    caller_id=creator.pk,
                )

                status = random.choice(statuses)
                if status != OrderStatus.PENDING_PRICE:
                    service.update_order(
                        str(order.id),
                        UpdateOrderDTO(
                            total_price=Decimal(random.randint(80, 2500)),
                            advance_percentage=random.choice([0, 30, 50]),
                            advance_paid=status != OrderStatus.PENDING_ADVANCE,
                        ),
                        admin_caller,
                    )
                    service.update_status(
                        str(order.id), status, "Seed", caller_id=admin.pk
                    )

                created_at = timezone.now() - timedelta(days=random.randint(0, 400))
                processing = timedelta(days=random.randint(1, 20))
                Order.objects.filter(id=order.id).update(
                    created_at=created_at, updated_at=created_at + processing
                )

        self.stdout.write(self.style.SUCCESS("Creating orders... Done!"))
        return count
