from django.urls import path
from . import views

urlpatterns = [
    path("events/<slug:slug>/generate/", views.generate, name="certificates_generate"),
    path("verify/<str:certificate_id>/", views.verify, name="certificate_verify"),
]
