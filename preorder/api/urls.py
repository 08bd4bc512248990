"""
Preorder API URLs.

Included by preorder.urls; mount the app in your project's urlpatterns:

    path('api/', include('preorder.urls')),
"""

from django.urls import path
from rest_framework.routers import DefaultRouter

from .views import OrderViewSet, health, pickup_info

router = DefaultRouter()
router.register("orders", OrderViewSet, basename="order")

urlpatterns = [
    path("admin/orders/", OrderViewSet.as_view({"get": "list"}), name="admin-orders"),
    path("pickup-info/", pickup_info, name="pickup-info"),
    path("health/", health, name="health"),
    *router.urls,
]
