from django.urls import path
from . import views

urlpatterns = [
    path("events/<slug:slug>/teams/", views.team_create, name="team_create"),
    path("events/<slug:slug>/teams/join/", views.team_join, name="team_join"),
    path("teams/<int:team_id>/accept/", views.invitation_accept, name="team_invitation_accept"),
    path("teams/<int:team_id>/decline/", views.invitation_decline, name="team_invitation_decline"),
]
