from django.urls import path
from apps.tire_orders import views

app_name = "tire_orders"

urlpatterns = [
    path("tire-orders", views.tire_orders_collection, name="collection"),
    path("tire-orders/<uuid:orderId>", views.tire_order_detail, name="detail"),
    path("tire-orders/<uuid:orderId>/confirm", views.confirm_order, name="confirm"),
    path("tire-orders/<uuid:orderId>/reject", views.reject_order, name="reject"),
]
