from django.urls import path, include, re_path
from django.contrib import admin
from django.conf import settings
from django.views.static import serve as _serve
import sys
import gatepass.admin_customization  # noqa: F401
from django.http import HttpResponse

urlpatterns = [
    path('favicon.ico', lambda request: HttpResponse(status=204), name='favicon'),
    path('admin/site/', admin.site.urls),
    path('', include('accounts.urls')),
    path('', include('people.urls')),
    path('', include('vehicles.urls')),
    path('', include('cards.urls')),
    path('', include('siteadmin.urls')),
]

# During development using `manage.py runserver` serve project static files
# directly so pages are styled without running collectstatic.
if 'runserver' in sys.argv or settings.DEBUG:
    urlpatterns += [
        re_path(r'^static/(?P<path>.*)$', _serve, {'document_root': settings.BASE_DIR / 'static'}),
    ]
