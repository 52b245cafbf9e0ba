from django.urls import path
from . import views

urlpatterns = [
    path("events/<slug:slug>/teams/<int:team_id>/<str:kind>/", views.score_submit, name="score_submit"),
]
