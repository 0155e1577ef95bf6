# api/v1/urls.py
from django.urls import include, path
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from apps.facilitiesapp.views import FacilityReservationViewSet, FacilityViewSet

# Create a router for v1 API endpoints
router = DefaultRouter()

router.register(r"facilities", FacilityViewSet, basename="facility")
router.register(
    r"facility-reservations", FacilityReservationViewSet, basename="facility-reservation"
)

urlpatterns = [
    path("auth/token/", TokenObtainPairView.as_view(), name="token-obtain-pair"),
    path("auth/token/refresh/", TokenRefreshView.as_view(), name="token-refresh"),
    path("", include(router.urls)),
]
