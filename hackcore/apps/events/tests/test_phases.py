from datetime import date
from io import StringIO
from unittest import mock

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.db import DatabaseError
from django.test import SimpleTestCase, TestCase

from hackcore.apps.core.errors import MilestoneOrderError, PhaseError
from hackcore.apps.events.models import Event, Phase
from hackcore.apps.events.services.phases import (
    Milestones,
    complete_event,
    next_phase,
    phase_for_date,
    publish_event,
    require_phase,
    reschedule,
    sync,
)
from hackcore.apps.leaderboard.models import ShortlistEntry
from hackcore.apps.notifications.models import Notification
from hackcore.apps.registration.models import MemberStatus, Team, TeamMember

User = get_user_model()

MILESTONES = Milestones(
    registration_deadline=date(2026, 3, 1),
    proposal_deadline=date(2026, 3, 10),
    execution_start=date(2026, 3, 20),
    execution_end=date(2026, 3, 22),
)


def make_event(**overrides) -> Event:
    fields = dict(
        title="Hack Demo",
        registration_deadline=MILESTONES.registration_deadline,
        proposal_deadline=MILESTONES.proposal_deadline,
        execution_start=MILESTONES.execution_start,
        execution_end=MILESTONES.execution_end,
        phase=Phase.REGISTRATION_OPEN,
    )
    fields.update(overrides)
    return Event.objects.create(**fields)


class PhaseForDateTests(SimpleTestCase):
    def test_each_window(self):
        cases = [
            (date(2026, 2, 28), Phase.REGISTRATION_OPEN),
            (date(2026, 3, 1), Phase.PROPOSAL_SUBMISSION),
            (date(2026, 3, 9), Phase.PROPOSAL_SUBMISSION),
            (date(2026, 3, 10), Phase.SHORTLISTING),
            (date(2026, 3, 19), Phase.SHORTLISTING),
            (date(2026, 3, 20), Phase.EXECUTION_ACTIVE),
            (date(2026, 3, 22), Phase.EXECUTION_ACTIVE),
            (date(2026, 3, 23), Phase.JUDGING),
        ]
        for today, expected in cases:
            with self.subTest(today=today):
                self.assertEqual(phase_for_date(today, MILESTONES), expected)

    def test_without_proposal_deadline_goes_straight_to_shortlisting(self):
        m = Milestones(date(2026, 3, 1), None, date(2026, 3, 20), date(2026, 3, 22))
        self.assertEqual(phase_for_date(date(2026, 3, 5), m), Phase.SHORTLISTING)

    def test_frozen_phases_never_move(self):
        for frozen in (Phase.DRAFT, Phase.COMPLETED):
            with self.subTest(phase=frozen):
                self.assertEqual(next_phase(frozen, date(2026, 3, 21), MILESTONES), frozen)

    def test_forward_only(self):
        # Las fechas apuntan atrás: se mantiene la fase actual
        self.assertEqual(
            next_phase(Phase.EXECUTION_ACTIVE, date(2026, 3, 12), MILESTONES), Phase.EXECUTION_ACTIVE
        )
        self.assertEqual(next_phase(Phase.SHORTLISTING, date(2026, 3, 21), MILESTONES), Phase.EXECUTION_ACTIVE)

    def test_milestones_must_not_decrease(self):
        bad = Milestones(date(2026, 3, 1), date(2026, 3, 25), date(2026, 3, 20), date(2026, 3, 22))
        with self.assertRaises(MilestoneOrderError):
            bad.validate()
        MILESTONES.validate()


class SyncTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.leader = User.objects.create_user(username="lider", password="x")
        cls.member = User.objects.create_user(username="miembro", password="x")
        cls.outsider = User.objects.create_user(username="pendiente", password="x")

    def setUp(self):
        self.event = make_event()
        confirmed = Team.objects.create(
            event=self.event, name="Confirmado", leader=self.leader, status=Team.Status.CONFIRMED
        )
        TeamMember.objects.create(team=confirmed, event=self.event, user=self.leader, position=1, status=MemberStatus.LEADER)
        TeamMember.objects.create(team=confirmed, event=self.event, user=self.member, position=2, status=MemberStatus.ACCEPTED)
        pending = Team.objects.create(event=self.event, name="Pendiente", leader=self.outsider)
        TeamMember.objects.create(team=pending, event=self.event, user=self.outsider, position=1, status=MemberStatus.LEADER)

    def test_sync_persists_transition(self):
        sync(self.event, today=date(2026, 3, 12))
        self.assertEqual(self.event.phase, Phase.SHORTLISTING)
        self.event.refresh_from_db()
        self.assertEqual(self.event.phase, Phase.SHORTLISTING)

    def test_sync_is_idempotent_and_notifies_once(self):
        today = date(2026, 3, 2)
        first = sync(self.event, today=today).phase
        second = sync(self.event, today=today).phase
        self.assertEqual(first, Phase.PROPOSAL_SUBMISSION)
        self.assertEqual(second, first)

        sent = Notification.objects.filter(kind="proposal_open")
        self.assertEqual(sent.count(), 2)
        self.assertEqual(set(sent.values_list("user_id", flat=True)), {self.leader.pk, self.member.pk})

        # Otra instancia (lectura vieja) tampoco re-dispara
        stale = Event.objects.get(pk=self.event.pk)
        sync(stale, today=date(2026, 3, 5))
        self.assertEqual(sent.count(), 2)

    def test_sync_skipping_proposal_window_does_not_notify(self):
        sync(self.event, today=date(2026, 3, 21))
        self.assertEqual(self.event.phase, Phase.EXECUTION_ACTIVE)
        self.assertFalse(Notification.objects.filter(kind="proposal_open").exists())

    def test_sync_returns_unsynced_event_on_storage_failure(self):
        with mock.patch(
            "hackcore.apps.events.services.phases._compare_and_set", side_effect=DatabaseError("db caída")
        ):
            result = sync(self.event, today=date(2026, 3, 12))
        self.assertEqual(result.phase, Phase.REGISTRATION_OPEN)
        self.event.refresh_from_db()
        self.assertEqual(self.event.phase, Phase.REGISTRATION_OPEN)

    def test_sync_lost_race_adopts_stored_phase(self):
        Event.objects.filter(pk=self.event.pk).update(phase=Phase.SHORTLISTING)
        result = sync(self.event, today=date(2026, 3, 12))
        self.assertEqual(result.phase, Phase.SHORTLISTING)
        self.assertFalse(Notification.objects.filter(kind="proposal_open").exists())

    def test_draft_is_frozen(self):
        draft = make_event(title="Borrador", phase=Phase.DRAFT)
        self.assertEqual(sync(draft, today=date(2026, 3, 21)).phase, Phase.DRAFT)

    def test_require_phase(self):
        require_phase(self.event, Phase.REGISTRATION_OPEN, today=date(2026, 2, 1))
        with self.assertRaises(PhaseError) as ctx:
            require_phase(self.event, Phase.JUDGING, today=date(2026, 2, 1))
        self.assertEqual(ctx.exception.current, Phase.REGISTRATION_OPEN)
        self.assertEqual(ctx.exception.status, 409)


class ExplicitTransitionTests(TestCase):
    def test_publish_then_sync(self):
        event = make_event(phase=Phase.DRAFT)
        publish_event(event, today=date(2026, 3, 12))
        self.assertEqual(event.phase, Phase.SHORTLISTING)
        with self.assertRaises(PhaseError):
            publish_event(event, today=date(2026, 3, 12))

    def test_complete_requires_judging(self):
        event = make_event(phase=Phase.EXECUTION_ACTIVE)
        with self.assertRaises(PhaseError):
            complete_event(event)
        Event.objects.filter(pk=event.pk).update(phase=Phase.JUDGING)
        event.refresh_from_db()
        complete_event(event)
        event.refresh_from_db()
        self.assertEqual(event.phase, Phase.COMPLETED)


class RescheduleTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.leader = User.objects.create_user(username="lider", password="x")

    def test_can_rewind_without_shortlist(self):
        event = make_event(phase=Phase.EXECUTION_ACTIVE)
        reschedule(event, today=date(2026, 3, 21), execution_start=date(2026, 3, 25), execution_end=date(2026, 3, 26))
        self.assertEqual(event.phase, Phase.SHORTLISTING)
        event.refresh_from_db()
        self.assertEqual(event.execution_start, date(2026, 3, 25))

    def test_cannot_rewind_before_execution_once_shortlisted(self):
        event = make_event(phase=Phase.EXECUTION_ACTIVE)
        team = Team.objects.create(event=event, name="Alfa", leader=self.leader, status=Team.Status.CONFIRMED)
        ShortlistEntry.objects.create(event=event, team=team, rank=1, total="8.00")

        with self.assertRaises(PhaseError):
            reschedule(
                event, today=date(2026, 3, 21), execution_start=date(2026, 3, 25), execution_end=date(2026, 3, 26)
            )
        event.refresh_from_db()
        self.assertEqual(event.phase, Phase.EXECUTION_ACTIVE)
        self.assertEqual(event.execution_start, date(2026, 3, 20))

    def test_edit_after_early_shortlist_keeps_explicit_advance(self):
        # Preselección confirmada antes de execution_start: las fechas dicen SHORTLISTING
        event = make_event(phase=Phase.EXECUTION_ACTIVE)
        team = Team.objects.create(event=event, name="Alfa", leader=self.leader, status=Team.Status.CONFIRMED)
        ShortlistEntry.objects.create(event=event, team=team, rank=1, total="8.00")

        reschedule(event, today=date(2026, 3, 15), execution_end=date(2026, 3, 23))
        self.assertEqual(event.phase, Phase.EXECUTION_ACTIVE)
        event.refresh_from_db()
        self.assertEqual(event.phase, Phase.EXECUTION_ACTIVE)
        self.assertEqual(event.execution_end, date(2026, 3, 23))

        reschedule(event, today=date(2026, 3, 15), execution_start=date(2026, 3, 18))
        event.refresh_from_db()
        self.assertEqual(event.execution_start, date(2026, 3, 18))

        # Mover la inscripción hacia adelante sí sería un retroceso real
        with self.assertRaises(PhaseError):
            reschedule(
                event,
                today=date(2026, 3, 15),
                registration_deadline=date(2026, 3, 16),
                proposal_deadline=date(2026, 3, 17),
            )

    def test_forward_move_goes_through_sync(self):
        event = make_event()
        reschedule(event, today=date(2026, 2, 20), registration_deadline=date(2026, 2, 15))
        self.assertEqual(event.phase, Phase.PROPOSAL_SUBMISSION)

    def test_rejects_bad_order_and_unknown_fields(self):
        event = make_event()
        with self.assertRaises(MilestoneOrderError):
            reschedule(event, today=date(2026, 2, 1), execution_end=date(2026, 3, 1))
        with self.assertRaises(MilestoneOrderError):
            reschedule(event, today=date(2026, 2, 1), title="Otro")


class SyncPhasesCommandTests(TestCase):
    def test_command_moves_active_events_only(self):
        live = make_event(title="Activo")
        draft = make_event(title="Borrador", phase=Phase.DRAFT)
        out = StringIO()
        call_command("sync_phases", today="2026-03-21", stdout=out)

        live.refresh_from_db()
        draft.refresh_from_db()
        self.assertEqual(live.phase, Phase.EXECUTION_ACTIVE)
        self.assertEqual(draft.phase, Phase.DRAFT)
        self.assertIn("1 eventos cambiaron de fase", out.getvalue())


class EventEndpointTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.staff = User.objects.create_user(username="admin", password="x", is_staff=True)
        cls.user = User.objects.create_user(username="ana", password="x")

    def setUp(self):
        self.event = make_event(
            title="Hack Futuro",
            phase=Phase.DRAFT,
            registration_deadline=date(2999, 1, 1),
            proposal_deadline=date(2999, 1, 10),
            execution_start=date(2999, 1, 20),
            execution_end=date(2999, 1, 22),
        )

    def test_drafts_are_hidden_until_published(self):
        self.assertEqual(self.client.get("/api/events/").json()["data"], [])

        url = f"/api/events/{self.event.slug}/publish/"
        self.client.force_login(self.user)
        self.assertEqual(self.client.post(url).status_code, 403)

        self.client.force_login(self.staff)
        r = self.client.post(url)
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["data"]["phase"], Phase.REGISTRATION_OPEN)
        self.assertEqual([e["slug"] for e in self.client.get("/api/events/").json()["data"]], [self.event.slug])

        r = self.client.post(url)
        self.assertEqual(r.status_code, 409)
        self.assertEqual(r.json()["code"], "phase")

    def test_reschedule_validates_dates(self):
        self.client.force_login(self.staff)
        url = f"/api/events/{self.event.slug}/reschedule/"
        r = self.client.post(url, {"execution_end": "2998-01-01"}, content_type="application/json")
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json()["code"], "milestone_order")

        r = self.client.post(url, {"execution_end": "2999-01-25"}, content_type="application/json")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["data"]["execution_end"], "2999-01-25")
