from django.urls import path
from . import views

urlpatterns = [
    path("", views.my_notifications, name="notifications_inbox"),
    path("read/", views.mark_all_read, name="notifications_mark_read"),
    path("events/<slug:slug>/announcements/", views.announcement_list, name="announcements_list"),
    path("events/<slug:slug>/announcements/new/", views.announcement_create, name="announcement_create"),
    path("announcements/<int:pk>/delete/", views.announcement_delete, name="announcement_delete"),
]
