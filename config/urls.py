# config/urls.py

from django.urls import include, path

from core import views as core_views
from users.urls import account_urlpatterns, platform_urlpatterns
from . import views

# -------------------------------------------------------------------
# URL CONFIGURATION
# -------------------------------------------------------------------

# Everything below lives inside one school: /tenants/<tenant_id>/...
tenant_urlpatterns = [
    path("", include("core.urls")),
    path("users/", include("users.urls")),
    path("", include("students.urls")),
    path("", include("admissions.urls")),
    path("", include("records.urls")),
    path("", include("communications.urls")),
    path("", include("billing.urls")),
]

urlpatterns = [
    # ----------------------------------------------------------------
    # Health & diagnostics
    # ----------------------------------------------------------------
    path("health/", views.health_check_view, name="health_check"),

    # ----------------------------------------------------------------
    # Authentication (session)
    # ----------------------------------------------------------------
    path("auth/", include((account_urlpatterns, "auth"), namespace="auth")),

    # ----------------------------------------------------------------
    # Platform administration (SuperAdmin)
    # ----------------------------------------------------------------
    path("platform/", include((platform_urlpatterns, "platform"), namespace="platform")),

    # ----------------------------------------------------------------
    # Tenants
    # ----------------------------------------------------------------
    path("tenants/", core_views.school_collection_view, name="school_list"),
    path("tenants/<int:tenant_id>/", include(tenant_urlpatterns)),
]

# -------------------------------------------------------------------
# Error handlers
# -------------------------------------------------------------------

handler400 = "config.views.handler400"
handler404 = "config.views.handler404"
handler500 = "config.views.handler500"
