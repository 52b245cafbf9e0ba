from django.urls import path
from . import views

urlpatterns = [
    path("events/<slug:slug>/problem/", views.problem_statement_view, name="problem_statement"),
    path("events/<slug:slug>/teams/<int:team_id>/proposal/", views.proposal_submit, name="proposal_submit"),
    path("events/<slug:slug>/teams/<int:team_id>/final/", views.final_submit, name="final_submit"),
]
