from datetime import timedelta

from django.conf import settings
from django.core.management.base import BaseCommand

from apps.orders.container import build_checkout_service


class Command(BaseCommand):
    help = (
        "Drive interrupted checkouts forward: finish orders stuck before 'finalized' "
        "and reopen carts locked by a checkout that never placed an order."
    )

    def add_arguments(self, parser):
        parser.add_argument(
            "--older-than",
            type=int,
            default=getattr(settings, "CHECKOUT_RESUME_AFTER_SECONDS", 60),
            help="Only touch rows untouched for at least this many seconds",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Report what would be resumed without writing anything",
        )

    def handle(self, *args, **options):
        service = build_checkout_service()
        older_than = timedelta(seconds=max(0, options["older_than"]))
        dry_run = options["dry_run"]

        pending = service.list_incomplete(older_than)
        self.stdout.write(f"Found {len(pending)} incomplete order(s).")
        resumed = failed = 0
        for entry in pending:
            if dry_run:
                self.stdout.write(
                    f"  order {entry.order_id} (cart {entry.cart_id}) is {entry.status}"
                )
                continue
            result, error = service.resume_order(entry.order_id)
            if error:
                failed += 1
                self.stderr.write(
                    f"  order {entry.order_id}: {error.code} {error.message}"
                )
                continue
            resumed += 1
            self.stdout.write(f"  order {result.order_id} -> {result.status}")

        released = service.release_stale_locks(older_than, dry_run=dry_run)
        verb = "Would release" if dry_run else "Released"
        self.stdout.write(f"{verb} {len(released)} stale cart lock(s).")

        summary = f"Resumed {resumed} order(s), {failed} failed."
        if failed:
            self.stdout.write(self.style.WARNING(summary))
        else:
            self.stdout.write(self.style.SUCCESS(summary))
