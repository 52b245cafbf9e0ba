from django.urls import path
from . import views

urlpatterns = [
    path("", views.event_list, name="events_list"),
    path("<slug:slug>/", views.event_detail, name="event_detail"),
    path("<slug:slug>/publish/", views.event_publish, name="event_publish"),
    path("<slug:slug>/reschedule/", views.event_reschedule, name="event_reschedule"),
]
