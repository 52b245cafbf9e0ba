from __future__ import annotations

from datetime import date

from django.core.management.base import BaseCommand, CommandError

from hackcore.apps.events.models import Event, FROZEN_PHASES
from hackcore.apps.events.services.phases import sync


class Command(BaseCommand):
    help = "Sincroniza la fase de todos los eventos no congelados según sus fechas."

    def add_arguments(self, parser):
        parser.add_argument("--slug", default=None, help="Solo este evento.")
        parser.add_argument("--today", default=None, help="Fecha de referencia YYYY-MM-DD (por defecto: hoy).")

    def handle(self, *args, **opts):
        today = None
        if opts.get("today"):
            try:
                today = date.fromisoformat(opts["today"])
            except ValueError:
                raise CommandError(f"Fecha inválida: {opts['today']}")

        qs = Event.objects.exclude(phase__in=FROZEN_PHASES).order_by("id")
        if opts.get("slug"):
            qs = qs.filter(slug=opts["slug"])
            if not qs.exists():
                raise CommandError(f"No existe evento activo con slug={opts['slug']}")

        changed = 0
        for event in qs:
            before = event.phase
            after = sync(event, today=today).phase
            if after != before:
                changed += 1
                self.stdout.write(f"  {event.slug}: {before} → {after}")

        self.stdout.write(self.style.SUCCESS(f"✓ {changed} eventos cambiaron de fase"))
