"""Main API URL router for /api/v1/."""
from django.urls import path, include
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from api.v1 import performance_views

router = DefaultRouter()
router.register(r'performance/weeks', performance_views.WeeklyPerformanceRecordViewSet, basename='performance-week')


app_name = 'api'
urlpatterns = [
    path('', include(router.urls)),

    # Auth endpoints
    path('auth/token/', TokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('auth/token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),

    # Performance
    path('performance/recompute/', performance_views.RecomputePerformanceAPIView.as_view(), name='performance-recompute'),
]
