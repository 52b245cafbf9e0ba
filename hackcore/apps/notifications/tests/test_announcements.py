from datetime import date

from django.contrib.auth import get_user_model
from django.test import TestCase

from hackcore.apps.core.errors import ForbiddenError, NotFoundError, ValidationError
from hackcore.apps.events.models import Event, Phase
from hackcore.apps.leaderboard.models import ShortlistEntry
from hackcore.apps.notifications.models import Announcement, Notification
from hackcore.apps.notifications.services.announcements import (
    announcements_for,
    audience_user_ids,
    create_announcement,
    delete_announcement,
)
from hackcore.apps.registration.models import MemberStatus, Team, TeamMember

User = get_user_model()


class AnnouncementTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.admin = User.objects.create_user(username="admin", password="x", is_staff=True)
        cls.admin2 = User.objects.create_user(username="admin2", password="x", is_staff=True)
        cls.ana = User.objects.create_user(username="ana", password="x")
        cls.bob = User.objects.create_user(username="bob", password="x")
        cls.cami = User.objects.create_user(username="cami", password="x")
        cls.dani = User.objects.create_user(username="dani", password="x")

    def setUp(self):
        self.event = Event.objects.create(
            title="Hack Avisos",
            registration_deadline=date(2026, 3, 1),
            proposal_deadline=date(2026, 3, 10),
            execution_start=date(2026, 3, 20),
            execution_end=date(2026, 3, 22),
            phase=Phase.EXECUTION_ACTIVE,
        )
        self.alfa = self._team("Alfa", [self.ana, self.bob], Team.Status.CONFIRMED)
        self._team("Beta", [self.cami], Team.Status.CONFIRMED)
        self._team("Gamma", [self.dani], Team.Status.PENDING)
        ShortlistEntry.objects.create(event=self.event, team=self.alfa, rank=1, total="9.00")

    def _team(self, name, users, status) -> Team:
        team = Team.objects.create(event=self.event, name=name, leader=users[0], status=status)
        for pos, user in enumerate(users, start=1):
            TeamMember.objects.create(
                team=team, event=self.event, user=user, position=pos,
                status=MemberStatus.LEADER if pos == 1 else MemberStatus.ACCEPTED,
            )
        return team

    def test_audiences(self):
        self.assertEqual(
            set(audience_user_ids(self.event, "all")), {self.ana.pk, self.bob.pk, self.cami.pk}
        )
        self.assertEqual(set(audience_user_ids(self.event, "shortlisted")), {self.ana.pk, self.bob.pk})
        with self.assertRaises(ValidationError):
            audience_user_ids(self.event, "vip")

    def test_create_notifies_audience(self):
        a = create_announcement(
            self.event, self.admin, "Cambio de sala", "Nos vemos en el aula 3.", audience="shortlisted",
            link="https://example.com/mapa",
        )
        self.assertEqual(a.notified_count, 2)
        self.assertEqual(Announcement.objects.get(pk=a.pk).notified_count, 2)
        sent = Notification.objects.filter(kind="announcement")
        self.assertEqual(set(sent.values_list("user_id", flat=True)), {self.ana.pk, self.bob.pk})
        self.assertEqual(sent.first().payload["announcement_id"], a.pk)

    def test_saved_even_without_recipients(self):
        ShortlistEntry.objects.all().delete()
        a = create_announcement(self.event, self.admin, "Aviso", "Pronto.", audience="shortlisted")
        self.assertEqual(a.notified_count, 0)
        self.assertTrue(Announcement.objects.filter(pk=a.pk).exists())

    def test_rejects_bad_input(self):
        with self.assertRaises(ValidationError):
            create_announcement(self.event, self.admin, "", "Mensaje")
        with self.assertRaises(ValidationError):
            create_announcement(self.event, self.admin, "Título", "Mensaje", link="no-es-url")
        self.assertFalse(Announcement.objects.exists())

    def test_visibility(self):
        create_announcement(self.event, self.admin, "Para todos", "Hola.", audience="all")
        create_announcement(self.event, self.admin, "Finalistas", "Hola.", audience="shortlisted")

        self.assertEqual(len(announcements_for(self.event, self.admin)), 2)
        self.assertEqual(len(announcements_for(self.event, self.ana)), 2)
        self.assertEqual([a.title for a in announcements_for(self.event, self.cami)], ["Para todos"])

    def test_only_author_deletes(self):
        a = create_announcement(self.event, self.admin, "Aviso", "Hola.")
        with self.assertRaises(ForbiddenError):
            delete_announcement(a.pk, self.admin2)
        delete_announcement(a.pk, self.admin)
        with self.assertRaises(NotFoundError):
            delete_announcement(a.pk, self.admin)


class AnnouncementEndpointTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.admin = User.objects.create_user(username="admin", password="x", is_staff=True)
        cls.ana = User.objects.create_user(username="ana", password="x")

    def setUp(self):
        self.event = Event.objects.create(
            title="Hack Avisos",
            registration_deadline=date(2999, 3, 1),
            execution_start=date(2999, 3, 20),
            execution_end=date(2999, 3, 22),
            phase=Phase.REGISTRATION_OPEN,
        )
        team = Team.objects.create(event=self.event, name="Alfa", leader=self.ana, status=Team.Status.CONFIRMED)
        TeamMember.objects.create(team=team, event=self.event, user=self.ana, position=1, status=MemberStatus.LEADER)

    def test_admin_only_create_and_delete(self):
        url = f"/api/notifications/events/{self.event.slug}/announcements/new/"
        body = {"title": "Bienvenida", "message": "Arrancamos el sábado.", "audience": "all"}

        self.client.force_login(self.ana)
        self.assertEqual(self.client.post(url, body, content_type="application/json").status_code, 403)

        self.client.force_login(self.admin)
        r = self.client.post(url, body, content_type="application/json")
        self.assertEqual(r.status_code, 201)
        self.assertEqual(r.json()["data"]["notified_count"], 1)
        pk = r.json()["data"]["id"]

        r = self.client.post(url, {**body, "audience": "vip"}, content_type="application/json")
        self.assertEqual(r.status_code, 400)

        self.client.force_login(self.ana)
        listed = self.client.get(f"/api/notifications/events/{self.event.slug}/announcements/").json()["data"]
        self.assertEqual([a["title"] for a in listed], ["Bienvenida"])
        self.assertEqual(self.client.post(f"/api/notifications/announcements/{pk}/delete/").status_code, 403)

        self.client.force_login(self.admin)
        self.assertEqual(self.client.post(f"/api/notifications/announcements/{pk}/delete/").status_code, 200)
        self.assertFalse(Announcement.objects.exists())
