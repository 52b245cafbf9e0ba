from django.urls import path
from . import views

urlpatterns = [
    path("events/<slug:slug>/", views.leaderboard_view, name="leaderboard_event"),
    path("events/<slug:slug>/shortlist/", views.shortlist_view, name="shortlist"),
    path("events/<slug:slug>/shortlist/confirm/", views.shortlist_confirm, name="shortlist_confirm"),
]
