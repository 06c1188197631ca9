from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from . import views
from .api.dashboard import DashboardView
from .api.keepalive import KeepaliveCsrfView, KeepaliveView

urlpatterns = [
    path('', views.home, name='home'),
    path('login', views.GatePassLoginView.as_view(), name='login'),
    path('logout', views.logout_view, name='logout'),
    path('oauth2/authorization/<str:provider>', views.oauth_login, name='oauth_login'),
    path('login/oauth2/code/<str:provider>', views.oauth_callback, name='oauth_callback'),
    path('dashboard', views.dashboard, name='dashboard'),
    path('error/403', views.access_denied, name='access_denied'),

    path('api/token/', views.GatePassTokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('api/token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
    path('api/keepalive', KeepaliveView.as_view(), name='keepalive'),
    path('api/keepalive/csrf', KeepaliveCsrfView.as_view(), name='keepalive_csrf'),
    path('api/user/dashboard', DashboardView.as_view(), name='api_dashboard'),
]
