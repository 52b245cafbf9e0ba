from __future__ import annotations

from django.contrib import admin

from .models import Team, TeamMember


class TeamMembersInline(admin.TabularInline):
    model = TeamMember
    extra = 0
    fields = ("position", "user", "status", "joined_at")
    readonly_fields = ("position", "user", "joined_at")
    can_delete = False
    show_change_link = True


@admin.register(Team)
class TeamAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "event",
        "leader",
        "status",
        "members_count",
        "join_code",
        "created_at",
    )
    list_filter = ("event", "status")
    search_fields = ("name", "join_code", "leader__username", "leader__email")
    raw_id_fields = ("event", "leader")
    inlines = [TeamMembersInline]

    def members_count(self, obj: Team) -> int:
        return obj.member_count()
    members_count.short_description = "Miembros"


@admin.register(TeamMember)
class TeamMemberAdmin(admin.ModelAdmin):
    list_display = ("user", "team", "event", "position", "status", "joined_at")
    list_filter = ("event", "status")
    search_fields = ("user__username", "user__email", "team__name")
    raw_id_fields = ("user", "event", "team")
