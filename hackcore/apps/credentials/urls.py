from django.urls import path
from . import views

urlpatterns = [
    path("scan/", views.scan, name="credential_scan"),
    path("inspect/", views.inspect, name="credential_inspect"),
    path("events/<slug:slug>/mine/", views.my_credentials, name="credentials_mine"),
    path("events/<slug:slug>/issue/", views.issue_for_event, name="credentials_issue"),
    path("events/<slug:slug>/attendance/", views.attendance, name="credentials_attendance"),
    path("events/<slug:slug>/meals/", views.meals, name="credentials_meals"),
]
