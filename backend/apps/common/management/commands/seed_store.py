from decimal import Decimal

from django.core.management.base import BaseCommand
from django.core.management.color import no_style
from django.db import connection, transaction

from apps.carts.models import Cart
from apps.catalog.models import Product
from apps.orders.models import Order
from apps.users.models import User

PRODUCTS = [
    (1, "Foldsack No. 1 Backpack", "109.95", "Everyday pack with a padded 15 inch laptop sleeve.", "men's clothing"),
    (2, "Slim Fit Henley T-Shirt", "22.30", "Raglan long sleeve, three-button placket.", "men's clothing"),
    (3, "Cotton Field Jacket", "55.99", "Outerwear for spring, autumn and mild winters.", "men's clothing"),
    (4, "Dragon Station Chain Bracelet", "695.00", "Gold and silver chain bracelet.", "jewelery"),
    (5, "Petite Micropave Ring", "168.00", "Solid gold ring with micropave setting.", "jewelery"),
    (6, "Rose Gold Plated Tunnel Plugs", "10.99", "316L stainless steel, double flared.", "jewelery"),
    (7, "2TB Portable External Hard Drive", "64.00", "USB 3.0, formatted NTFS.", "electronics"),
    (8, "1TB SATA III SSD", "109.00", "Read/write speeds up to 535MB/s / 450MB/s.", "electronics"),
    (9, "21.5 inch Full HD IPS Monitor", "599.00", "75Hz, zero-frame design.", "electronics"),
    (10, "3-in-1 Snowboard Jacket", "56.99", "Detachable fleece liner and hood.", "women's clothing"),
    (11, "Striped Rain Jacket", "39.99", "Lightweight, hooded, two side pockets.", "women's clothing"),
    (12, "Short Sleeve Boat Neck Top", "9.85", "Rayon and spandex, ribbed sleeves.", "women's clothing"),
]

USERS = [
    {
        "email": "admin@storefront.local",
        "username": "admin",
        "password": "admin-pass-123",
        "first_name": "Store",
        "last_name": "Admin",
        "is_staff": True,
        "is_superuser": True,
    },
    {
        "email": "john@storefront.local",
        "username": "johnd",
        "password": "john-pass-123",
        "first_name": "John",
        "last_name": "Doe",
    },
]


class Command(BaseCommand):
    help = "Seed sample products and accounts for local development."

    def add_arguments(self, parser):
        parser.add_argument(
            "--flush",
            action="store_true",
            help="Delete existing orders, carts and products before seeding",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        if options["flush"]:
            self.stdout.write("Flushing existing data...")
            Order.objects.all().delete()
            Cart.objects.all().delete()
            Product.objects.all().delete()

        self.stdout.write("Seeding products...")
        for pid, name, price, description, category in PRODUCTS:
            Product.objects.update_or_create(
                id=pid,
                defaults={
                    "name": name,
                    "price": Decimal(price),
                    "description": description,
                    "category": category,
                },
            )

        self.stdout.write("Seeding users...")
        for payload in USERS:
            attrs = dict(payload)
            raw_password = attrs.pop("password")
            email = attrs.pop("email")
            user, _ = User.objects.update_or_create(email=email, defaults=attrs)
            user.set_password(raw_password)
            user.save()

        # Explicit ids were inserted; move the sequence past them.
        sql_list = connection.ops.sequence_reset_sql(no_style(), [Product])
        if sql_list:
            with connection.cursor() as cursor:
                for sql in sql_list:
                    cursor.execute(sql)

        self.stdout.write(self.style.SUCCESS("Store seed completed."))
