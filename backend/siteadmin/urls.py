from django.urls import path

from . import views

urlpatterns = [
    path('admin/backup', views.backup_list, name='backup_list'),
    path('admin/backup/create', views.backup_create, name='backup_create'),
    path('admin/backup/download', views.backup_download, name='backup_download'),
    path('admin/backup/delete', views.backup_delete, name='backup_delete'),
    path('admin/email', views.bulk_email, name='bulk_email'),
]
