"""
Preorder URL Configuration.
"""

from django.urls import include, path

from preorder.views import stock_stream_view

app_name = "preorder"

urlpatterns = [
    path("stock-stream/", stock_stream_view, name="stock-stream"),
    path("", include("preorder.api.urls")),
]
