from __future__ import annotations

import csv
import re
import secrets
import unicodedata
from datetime import datetime
from pathlib import Path
from typing import Optional

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from django.db.models import Max
from django.utils import timezone

from openpyxl import load_workbook

from hackcore.apps.events.models import Event
from hackcore.apps.registration.models import MemberStatus, Team, TeamMember
from hackcore.apps.registration.services.teams import refresh_team_status

User = get_user_model()


# ======================
# Utilidades de nombres
# ======================

def _strip_accents(s: str) -> str:
    return "".join(c for c in unicodedata.normalize("NFKD", s) if not unicodedata.combining(c))

def _to_username_slug(full_name: str) -> str:
    """
    Genera un username base:
    - minúsculas
    - sin acentos
    - solo [a-z0-9_]
    """
    s = full_name.strip().lower()
    s = _strip_accents(s)
    s = re.sub(r"[^a-z0-9]+", "_", s)
    s = s.strip("_")
    return s or "user"

def _split_full_name(full_name: str) -> tuple[str, str]:
    parts = full_name.strip().split()
    if not parts:
        return "", ""
    if len(parts) == 1:
        return parts[0], ""
    return parts[0], " ".join(parts[1:])

def _ensure_unique_username(base: str) -> str:
    candidate = base or "user"
    i = 1
    while User.objects.filter(username=candidate).exists():
        candidate = f"{base}{i}"
        i += 1
    return candidate

def _get_or_create_user(full_name: str, email: str | None) -> tuple[object, Optional[str], bool]:
    """
    Localiza por email; si no existe crea el usuario con password aleatoria.
    Retorna (user, password_si_nuevo, created_bool)
    """
    full_name = (full_name or "").strip()
    email = (email or "").strip().lower()

    if email:
        u = User.objects.filter(email__iexact=email).first()
        if u is not None:
            return u, None, False

    base_username = _to_username_slug(full_name or (email.split("@")[0] if email else "user"))
    username = _ensure_unique_username(base_username)

    first_name, last_name = _split_full_name(full_name or username)
    new_password = secrets.token_urlsafe(9)
    u = User(username=username, email=email or "", first_name=first_name, last_name=last_name)
    u.set_password(new_password)
    u.save()
    return u, new_password, True


# ======================
# Importador
# ======================

COLUMNS = [
    "team_name",
    "leader_name",
    "leader_email",
    "member2_name",
    "member2_email",
    "member3_name",
    "member3_email",
    "member4_name",
    "member4_email",
]

class Command(BaseCommand):
    help = "Importa equipos confirmados desde un .xlsx (líder + hasta 3 miembros); crea usuarios si faltan."

    def add_arguments(self, parser):
        parser.add_argument("xlsx_path", type=str, help="Ruta al archivo .xlsx con los equipos")
        parser.add_argument("--sheet", type=str, default=None, help="Nombre de la hoja (por defecto: primera)")
        parser.add_argument("--event-slug", required=True, help="Slug del evento destino")
        parser.add_argument("--dry-run", action="store_true", help="Simula sin escribir cambios")

    def handle(self, *args, **options):
        xlsx_path = Path(options["xlsx_path"])
        sheet_name = options.get("sheet")
        dry_run = options.get("dry_run", False)

        if not xlsx_path.exists():
            raise CommandError(f"Archivo no encontrado: {xlsx_path}")

        try:
            event = Event.objects.get(slug=options["event_slug"])
        except Event.DoesNotExist:
            raise CommandError(f"Evento '{options['event_slug']}' no existe.")

        wb = load_workbook(filename=str(xlsx_path), data_only=True)
        ws = wb[sheet_name] if sheet_name else wb.worksheets[0]

        header_cells = [c.value for c in next(ws.iter_rows(min_row=1, max_row=1))]
        headers = [str(h).strip() if h is not None else "" for h in header_cells]
        for i, col in enumerate(COLUMNS):
            if i >= len(headers) or headers[i] != col:
                raise CommandError(
                    f"Cabecera inválida en columna {i+1}. Esperado '{col}', encontrado '{headers[i] if i < len(headers) else ''}'."
                )

        report_path = Path.cwd() / f"import_report_{datetime.now():%Y%m%d_%H%M%S}.csv"
        report_fp = None
        writer = None
        if not dry_run:
            report_fp = report_path.open("w", newline="", encoding="utf-8")
            writer = csv.writer(report_fp)
            writer.writerow(["row", "status", "team_name", "created_users(user:pass)", "members_added", "warnings", "errors"])

        total = ok = errs = warns = 0

        for idx, row in enumerate(ws.iter_rows(min_row=2), start=2):
            vals = [(str(c.value).strip() if c.value is not None else "") for c in row]
            data = dict(zip(headers, vals))
            if not any(data.get(c) for c in COLUMNS):
                continue
            total += 1

            status = "OK"
            created_creds: list[str] = []
            members_added = 0
            warnings_list: list[str] = []
            errors_list: list[str] = []

            try:
                team_name = data["team_name"]
                if not team_name:
                    raise CommandError("team_name vacío.")

                people = [(data["leader_name"], data["leader_email"])]
                for n in (2, 3, 4):
                    full, email = data.get(f"member{n}_name", ""), data.get(f"member{n}_email", "")
                    if full or email:
                        people.append((full, email))
                if len(people) > event.max_team_size:
                    warnings_list.append(f"Equipo excede {event.max_team_size}; miembros extra ignorados.")
                    people = people[: event.max_team_size]

                if dry_run:
                    members_added = len(people)
                else:
                    with transaction.atomic():
                        users = []
                        for full, email in people:
                            u, pw, created = _get_or_create_user(full, email)
                            if created and pw:
                                created_creds.append(f"{u.username}:{pw}")
                            users.append(u)

                        leader = users[0]
                        team, _ = Team.objects.get_or_create(event=event, name=team_name, defaults={"leader": leader})
                        last = team.members.aggregate(m=Max("position"))["m"] or 0
                        for i, u in enumerate(users):
                            existing = TeamMember.objects.filter(event=event, user=u).first()
                            if existing is not None:
                                if existing.team_id != team.pk:
                                    warnings_list.append(f"{u.username} ya está en otro equipo; ignorado.")
                                continue
                            last += 1
                            TeamMember.objects.create(
                                team=team,
                                event=event,
                                user=u,
                                position=last,
                                status=MemberStatus.LEADER if u.pk == team.leader_id else MemberStatus.ACCEPTED,
                                joined_at=timezone.now(),
                            )
                            members_added += 1
                        refresh_team_status(team)

            except Exception as e:
                status = "ERROR"
                errors_list.append(str(e))
                errs += 1
            else:
                ok += 1
                warns += len(warnings_list)

            if writer:
                writer.writerow([
                    idx,
                    status,
                    data.get("team_name", ""),
                    ";".join(created_creds),
                    members_added,
                    "; ".join(warnings_list),
                    "; ".join(errors_list),
                ])

        if report_fp:
            report_fp.close()

        self.stdout.write(self.style.SUCCESS(f"Filas procesadas: {total}"))
        self.stdout.write(self.style.SUCCESS(f"OK: {ok}  ·  ERRORES: {errs}  ·  WARNINGS: {warns}"))
        if not dry_run:
            self.stdout.write(self.style.SUCCESS(f"Reporte: {report_path}"))
        else:
            self.stdout.write(self.style.WARNING("Dry-run: no se escribió reporte ni se crearon usuarios/equipos."))
