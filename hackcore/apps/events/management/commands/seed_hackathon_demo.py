from __future__ import annotations

import random
from datetime import timedelta

from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from django.utils import timezone
from django.utils.text import slugify

from hackcore.apps.events.models import Event, Phase
from hackcore.apps.events.services.phases import publish_event
from hackcore.apps.registration.models import MemberStatus, Team, TeamMember
from hackcore.apps.registration.services.teams import refresh_team_status
from hackcore.apps.scoring.models import ScoreRecord
from hackcore.apps.scoring.services.engine import DIMENSIONS
from hackcore.apps.scoring.services.records import submit_score

DEMO_PASSWORD = "Pass1234!"


def ensure_demo_user(username: str, email: str, **extra):
    User = get_user_model()
    user, _ = User.objects.get_or_create(username=username, defaults={"email": email, **extra})
    if not user.has_usable_password():
        user.set_password(DEMO_PASSWORD)
        user.save()
    return user


class Command(BaseCommand):
    help = "Crea un hackathon DEMO en fase de preselección, con equipos confirmados y puntajes de preselección."

    def add_arguments(self, parser):
        parser.add_argument("--title", type=str, default="Smart India Hackathon")
        parser.add_argument("--slug", type=str, default="")
        parser.add_argument("--teams", type=int, default=8)
        parser.add_argument("--team-size", type=int, default=3)
        parser.add_argument("--shortlist", type=int, default=4)
        parser.add_argument("--seed", type=int, default=None, help="Semilla para puntajes reproducibles")

    @transaction.atomic
    def handle(self, *args, **opts):
        title: str = opts["title"]
        slug: str = opts["slug"] or slugify(title)
        n_teams: int = opts["teams"]
        team_size: int = opts["team_size"]
        rng = random.Random(opts["seed"])

        if team_size < 1 or team_size > 4:
            raise CommandError("--team-size debe estar entre 1 y 4.")
        if Event.objects.filter(slug=slug).exists():
            raise CommandError(f"Ya existe un evento con slug '{slug}'.")

        # 1) Jurado
        judge = ensure_demo_user("judge_demo", "judge@example.com", is_staff=True)
        judges, _ = Group.objects.get_or_create(name="judges")
        judge.groups.add(judges)

        # 2) Evento con fechas que lo dejan en preselección hoy
        today = timezone.localdate()
        event = Event.objects.create(
            title=title,
            slug=slug,
            committee_name="Comité Organizador DEMO",
            registration_deadline=today - timedelta(days=10),
            proposal_deadline=today - timedelta(days=3),
            execution_start=today + timedelta(days=5),
            execution_end=today + timedelta(days=6),
            shortlist_target_count=opts["shortlist"],
            max_team_size=max(4, team_size),
            meals=["breakfast", "lunch", "dinner"],
            created_by=judge,
        )
        publish_event(event, today=today)
        if event.phase != Phase.SHORTLISTING:
            raise CommandError(f"Fase inesperada tras publicar: {event.phase}")

        # 3) Equipos confirmados (alta directa: la inscripción ya cerró)
        now = timezone.now()
        for t in range(1, n_teams + 1):
            users = [
                ensure_demo_user(f"{slug}_t{t}_m{m}", f"t{t}m{m}@example.com", first_name=f"Miembro {m}", last_name=f"Equipo {t}")
                for m in range(1, team_size + 1)
            ]
            team = Team.objects.create(event=event, name=f"Equipo {t:02d}", leader=users[0])
            for pos, u in enumerate(users, start=1):
                TeamMember.objects.create(
                    team=team,
                    event=event,
                    user=u,
                    position=pos,
                    status=MemberStatus.LEADER if pos == 1 else MemberStatus.ACCEPTED,
                    joined_at=now,
                )
            refresh_team_status(team)

            # 4) Puntaje de preselección
            dims = {d: f"{rng.randint(40, 100) / 10:.1f}" for d in DIMENSIONS}
            submit_score(event, team, judge, ScoreRecord.Kind.SCREENING, dims, today=today)

        self.stdout.write(self.style.SUCCESS(
            f"Evento '{event.title}' ({event.slug}) en fase {event.phase}: {n_teams} equipos puntuados."
        ))
        self.stdout.write(f"Juez: judge_demo / {DEMO_PASSWORD}")
