import os
import tempfile
from datetime import date
from io import StringIO

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.test import TestCase
from openpyxl import Workbook

from hackcore.apps.core.errors import ForbiddenError, NotFoundError, PhaseError, ValidationError
from hackcore.apps.events.models import Event, Phase
from hackcore.apps.notifications.models import Notification
from hackcore.apps.registration.management.commands.import_teams_xlsx import COLUMNS
from hackcore.apps.registration.models import MemberStatus, Team, TeamMember
from hackcore.apps.registration.services.teams import (
    accept_invitation,
    create_team,
    decline_invitation,
    ensure_team_leader,
    join_team_by_code,
)

User = get_user_model()

OPEN = date(2026, 2, 1)


def make_event(**overrides) -> Event:
    fields = dict(
        title="Hack Inscripción",
        registration_deadline=date(2026, 3, 1),
        proposal_deadline=date(2026, 3, 10),
        execution_start=date(2026, 3, 20),
        execution_end=date(2026, 3, 22),
        phase=Phase.REGISTRATION_OPEN,
        max_team_size=3,
    )
    fields.update(overrides)
    return Event.objects.create(**fields)


class CreateTeamTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.leader = User.objects.create_user(username="ana", email="ana@example.com", password="x")
        cls.bob = User.objects.create_user(username="bob", email="bob@example.com", password="x")
        cls.cami = User.objects.create_user(username="cami", email="cami@example.com", password="x")
        cls.dani = User.objects.create_user(username="dani", email="dani@example.com", password="x")

    def setUp(self):
        self.event = make_event()

    def test_leader_is_first_member_and_invitees_pending(self):
        team = create_team(self.event, self.leader, "Los Bits", [self.bob, self.cami], today=OPEN)

        members = list(team.members.order_by("position"))
        self.assertEqual([m.user_id for m in members], [self.leader.pk, self.bob.pk, self.cami.pk])
        self.assertEqual(members[0].status, MemberStatus.LEADER)
        self.assertEqual({m.status for m in members[1:]}, {MemberStatus.PENDING})
        self.assertEqual(team.status, Team.Status.PENDING)
        self.assertEqual(Notification.objects.filter(kind="team_invite").count(), 2)

    def test_team_confirms_when_everyone_accepts(self):
        team = create_team(self.event, self.leader, "Los Bits", [self.bob, self.cami], today=OPEN)
        accept_invitation(team, self.bob)
        self.assertEqual(Team.objects.get(pk=team.pk).status, Team.Status.PENDING)

        accept_invitation(team, self.cami)
        self.assertEqual(Team.objects.get(pk=team.pk).status, Team.Status.CONFIRMED)
        self.assertEqual(Notification.objects.filter(kind="team_confirmed").count(), 3)

        with self.assertRaises(ValidationError):
            accept_invitation(team, self.cami)

    def test_decline_removes_member_and_notifies_leader(self):
        team = create_team(self.event, self.leader, "Los Bits", [self.bob], today=OPEN)
        decline_invitation(team, self.bob)

        self.assertFalse(TeamMember.objects.filter(team=team, user=self.bob).exists())
        self.assertTrue(Notification.objects.filter(kind="team_member_left", user=self.leader).exists())
        self.assertEqual(Team.objects.get(pk=team.pk).status, Team.Status.CONFIRMED)

        with self.assertRaises(ValidationError):
            decline_invitation(team, self.leader)
        with self.assertRaises(NotFoundError):
            decline_invitation(team, self.dani)

    def test_one_team_per_user_per_event(self):
        create_team(self.event, self.leader, "Los Bits", [self.bob], today=OPEN)
        with self.assertRaises(ValidationError):
            create_team(self.event, self.cami, "Otro", [self.bob], today=OPEN)

    def test_size_bounds(self):
        with self.assertRaises(ValidationError):
            create_team(self.event, self.leader, "Grande", [self.bob, self.cami, self.dani], today=OPEN)

        strict = make_event(title="Mínimo dos", min_team_size=2)
        with self.assertRaises(ValidationError):
            create_team(strict, self.leader, "Solo", [], today=OPEN)

    def test_registration_closed(self):
        with self.assertRaises(PhaseError):
            create_team(self.event, self.leader, "Tarde", [self.bob], today=date(2026, 3, 5))

    def test_only_leader_passes_leader_check(self):
        team = create_team(self.event, self.leader, "Los Bits", [self.bob], today=OPEN)
        ensure_team_leader(team, self.leader)
        with self.assertRaises(ForbiddenError):
            ensure_team_leader(team, self.bob)


class JoinByCodeTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.leader = User.objects.create_user(username="ana", password="x")
        cls.bob = User.objects.create_user(username="bob", password="x")
        cls.cami = User.objects.create_user(username="cami", password="x")

    def setUp(self):
        self.event = make_event(max_team_size=2)
        self.team = create_team(self.event, self.leader, "Los Bits", today=OPEN)

    def test_join_with_code(self):
        team = join_team_by_code(self.event, self.bob, self.team.join_code.lower(), today=OPEN)
        member = TeamMember.objects.get(team=team, user=self.bob)
        self.assertEqual(member.position, 2)
        self.assertEqual(member.status, MemberStatus.ACCEPTED)

    def test_bad_code_and_full_team(self):
        with self.assertRaises(NotFoundError):
            join_team_by_code(self.event, self.bob, "ZZZZZZZZ", today=OPEN)

        join_team_by_code(self.event, self.bob, self.team.join_code, today=OPEN)
        with self.assertRaises(ValidationError):
            join_team_by_code(self.event, self.cami, self.team.join_code, today=OPEN)


class TeamEndpointTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.leader = User.objects.create_user(username="ana", email="ana@example.com", password="x")
        cls.bob = User.objects.create_user(username="bob", email="bob@example.com", password="x")

    def test_create_team_requires_login(self):
        event = make_event(registration_deadline=date(2999, 1, 1), proposal_deadline=None,
                           execution_start=date(2999, 1, 2), execution_end=date(2999, 1, 3))
        url = f"/api/registration/events/{event.slug}/teams/"
        r = self.client.post(url, {"name": "X"}, content_type="application/json")
        self.assertEqual(r.status_code, 401)

        self.client.force_login(self.leader)
        r = self.client.post(
            url, {"name": "Los Bits", "member_emails": ["BOB@example.com"]}, content_type="application/json"
        )
        self.assertEqual(r.status_code, 201)
        body = r.json()
        self.assertTrue(body["success"])
        self.assertEqual(len(body["data"]["members"]), 2)

        r = self.client.post(url, {"name": "Otro"}, content_type="application/json")
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json()["code"], "validation_error")


class ImportTeamsXlsxTests(TestCase):
    def setUp(self):
        self.event = make_event(title="Hack Importado", phase=Phase.SHORTLISTING)
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        cwd = os.getcwd()
        os.chdir(self.tmp.name)
        self.addCleanup(os.chdir, cwd)

    def _workbook(self, rows) -> str:
        wb = Workbook()
        ws = wb.active
        ws.append(COLUMNS)
        for row in rows:
            ws.append(row)
        path = os.path.join(self.tmp.name, "equipos.xlsx")
        wb.save(path)
        return path

    def test_imports_confirmed_team_and_creates_users(self):
        path = self._workbook([
            ["Equipo Uno", "Ana Pérez", "ANA@example.com", "Bruno Díaz", "bruno@example.com", None, None, None, None],
        ])
        out = StringIO()
        call_command("import_teams_xlsx", path, "--event-slug", self.event.slug, stdout=out)

        team = Team.objects.get(event=self.event, name="Equipo Uno")
        self.assertEqual(team.status, Team.Status.CONFIRMED)
        self.assertEqual(team.leader.email, "ana@example.com")
        self.assertEqual(team.leader.username, "ana_perez")
        self.assertEqual(
            list(team.members.order_by("position").values_list("status", flat=True)),
            [MemberStatus.LEADER, MemberStatus.ACCEPTED],
        )
        self.assertIn("OK: 1", out.getvalue())
        self.assertTrue(any(name.startswith("import_report_") for name in os.listdir(self.tmp.name)))

    def test_dry_run_writes_nothing(self):
        path = self._workbook([
            ["Equipo Uno", "Ana", "ana@example.com", None, None, None, None, None, None],
        ])
        call_command("import_teams_xlsx", path, "--event-slug", self.event.slug, "--dry-run", stdout=StringIO())
        self.assertFalse(Team.objects.exists())
        self.assertFalse(User.objects.filter(email="ana@example.com").exists())
