from unittest import mock

from django.contrib.auth import get_user_model
from django.db import DatabaseError
from django.test import TestCase

from hackcore.apps.notifications.models import Notification
from hackcore.apps.notifications.services.sink import notify, notify_many

User = get_user_model()


class SinkTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.ana = User.objects.create_user(username="ana", password="x")
        cls.bob = User.objects.create_user(username="bob", password="x")

    def test_notify_many_dedupes(self):
        sent = notify_many([self.ana.pk, self.bob.pk, self.ana.pk], "Hola", "Mensaje", kind="demo")
        self.assertEqual(sent, 2)
        self.assertEqual(Notification.objects.filter(kind="demo").count(), 2)
        self.assertEqual(notify_many([], "Hola", "Mensaje", kind="demo"), 0)

    def test_failures_are_logged_not_raised(self):
        with mock.patch.object(Notification.objects, "create", side_effect=DatabaseError("sin espacio")):
            with self.assertLogs("hackcore.apps.notifications.services.sink", level="WARNING"):
                self.assertIsNone(notify(self.ana.pk, "Hola", "Mensaje", kind="demo", payload={"x": 1}))

        with mock.patch.object(Notification.objects, "bulk_create", side_effect=DatabaseError("sin espacio")):
            with self.assertLogs("hackcore.apps.notifications.services.sink", level="WARNING"):
                self.assertEqual(notify_many([self.ana.pk], "Hola", "Mensaje", kind="demo"), 0)

        # La transacción sigue usable
        self.assertIsNotNone(notify(self.ana.pk, "Hola", "Mensaje", kind="demo"))


class InboxEndpointTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.ana = User.objects.create_user(username="ana", password="x")

    def test_inbox_and_mark_read(self):
        self.assertEqual(self.client.get("/api/notifications/").status_code, 401)

        notify(self.ana.pk, "Uno", "Primero", kind="demo")
        notify(self.ana.pk, "Dos", "Segundo", kind="demo")
        self.client.force_login(self.ana)

        data = self.client.get("/api/notifications/").json()["data"]
        self.assertEqual([n["title"] for n in data], ["Dos", "Uno"])

        r = self.client.post("/api/notifications/read/")
        self.assertEqual(r.json()["data"]["updated"], 2)
        self.assertFalse(Notification.objects.filter(user=self.ana, is_read=False).exists())
