from django.urls import path

from . import views

urlpatterns = [
    path('view/images', views.image_management, name='image_management'),
    path('view/images/detail', views.ImageDetailView.as_view(), name='image_detail'),
    path('view/images/upload', views.image_upload, name='image_upload'),
    path('view/images/delete', views.image_delete, name='image_delete'),
    path('uploads/images/<path:path>', views.serve_image, name='serve_image'),

    path('idcard/preview', views.idcard_preview, name='idcard_preview'),
    path('idcard/front/<str:emp_no>.png', views.idcard_front, name='idcard_front'),
    path('idcard/back/<str:emp_no>.png', views.idcard_back, name='idcard_back'),

    path('qr/generate', views.qr_generate_form, name='qr_generate'),
    path('qr/code', views.qr_code, name='qr_code'),
    path('qr/generate/student', views.qr_generate_students, name='qr_generate_students'),
    path('qr/generate/staff', views.qr_generate_staff, name='qr_generate_staff'),
]
