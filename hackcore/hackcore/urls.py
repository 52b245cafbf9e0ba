from django.contrib import admin
from django.urls import include, path

from hackcore.apps.events import views as event_views

urlpatterns = [
    path("admin/", admin.site.urls),

    # API healthcheck
    path("api/health/", event_views.health, name="api_health"),

    # API JSON por app
    path("api/events/", include("hackcore.apps.events.urls")),
    path("api/registration/", include("hackcore.apps.registration.urls")),
    path("api/submissions/", include("hackcore.apps.submissions.urls")),
    path("api/scoring/", include("hackcore.apps.scoring.urls")),
    path("api/judging/", include("hackcore.apps.judging.urls")),
    path("api/leaderboard/", include("hackcore.apps.leaderboard.urls")),
    path("api/credentials/", include("hackcore.apps.credentials.urls")),
    path("api/certificates/", include("hackcore.apps.certificates.urls")),
    path("api/notifications/", include("hackcore.apps.notifications.urls")),
]
