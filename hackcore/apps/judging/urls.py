from django.urls import path
from . import views

urlpatterns = [
    path("events/<slug:slug>/my-teams/", views.my_teams, name="judging_my_teams"),
    path("events/<slug:slug>/assign/", views.assign, name="judging_assign"),
    path("events/<slug:slug>/assign/<int:judge_id>/<int:team_id>/remove/", views.unassign, name="judging_unassign"),
    path("events/<slug:slug>/finale/", views.grand_finale, name="judging_grand_finale"),
    path("events/<slug:slug>/lock/", views.scores_lock, name="judging_lock_scores"),
]
