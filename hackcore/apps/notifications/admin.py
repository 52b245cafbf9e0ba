from django.contrib import admin

from .models import Announcement, Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("user", "kind", "title", "is_read", "created_at")
    list_filter = ("kind", "is_read")
    search_fields = ("user__username", "user__email", "title")
    raw_id_fields = ("user",)


@admin.register(Announcement)
class AnnouncementAdmin(admin.ModelAdmin):
    list_display = ("title", "event", "audience", "notified_count", "created_by", "created_at")
    list_filter = ("audience", "event")
    search_fields = ("title", "message")
    readonly_fields = ("notified_count", "created_at")
