from django.urls import path

from . import api_views, views

urlpatterns = [
    path('vehicle/insert', views.insert_form, name='vehicle_insert'),
    path('vehicle/add', views.add_vehicle, name='vehicle_add'),
    path('vehicle/update', views.update_vehicle, name='vehicle_update'),
    path('vehicle/delete', views.delete_vehicle, name='vehicle_delete'),
    path('vehicle/pending', views.pending, name='vehicle_pending'),
    path('vehicle/approve', views.approve, name='vehicle_approve'),
    path('vehicle/reject', views.reject, name='vehicle_reject'),
    path('vehicle/search', views.search, name='vehicle_search'),
    path('vehicle/scanner', views.scanner, name='vehicle_scanner'),
    path('vehicle/certificate/download', views.certificate_download, name='certificate_download'),
    path('vehicle/certificate/delete', views.certificate_delete, name='certificate_delete'),
    path('my/vehicle', views.my_vehicles, name='my_vehicles'),
    path('my/vehicle/add', views.my_vehicle_add, name='my_vehicle_add'),

    path('api/vehicle/check', api_views.VehicleCheckView.as_view(), name='api_vehicle_check'),
    path('api/vehicle/types', api_views.VehicleTypesView.as_view(), name='api_vehicle_types'),
]
