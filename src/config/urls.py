from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import (
    SpectacularAPIView,
    SpectacularRedocView,
    SpectacularSwaggerView,
)
from rest_framework_simplejwt.views import (
    TokenObtainPairView,
    TokenRefreshView,
    TokenVerifyView,
)

# Bearer tokens for the Identity Context (SimpleJWT)
auth_patterns = [
    path("token/", TokenObtainPairView.as_view(), name="token_obtain"),
    path("token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
    path("token/verify/", TokenVerifyView.as_view(), name="token_verify"),
]

# Bounded contexts, versioned together
api_v1_patterns = [
    path("auth/", include(auth_patterns)),
    path("", include("modules.identity.urls")),
    path("", include("modules.customers.urls")),
    path("", include("modules.orders.urls")),
    path("", include("modules.analytics.urls")),
]

urlpatterns = [
    path("admin/", admin.site.urls),
    path("", include("modules.core.urls")),
    path("api/v1/", include(api_v1_patterns)),
    # OpenAPI schema & docs (public)
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    path(
        "api/docs/",
        SpectacularSwaggerView.as_view(url_name="schema"),
        name="swagger-ui",
    ),
    path("api/redoc/", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
]
