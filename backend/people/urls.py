from django.urls import path

from . import api_views, views

urlpatterns = [
    path('search/person', views.person_search, name='person_search'),
    path('staff/detail', views.staff_detail_view, name='staff_detail'),
    path('staff/search', views.staff_search, name='staff_search'),
    path('student/detail', views.student_detail, name='student_detail'),
    path('student/search', views.student_search, name='student_search'),
    path('view/detail', views.view_detail, name='view_detail'),

    path('api/user/info', api_views.UserInfoView.as_view(), name='api_user_info'),
    path('api/user/email', api_views.UserEmailView.as_view(), name='api_user_email'),
    path('api/person/master', api_views.PersonMasterView.as_view(), name='api_person_master'),
    path('api/person/resolve', api_views.PersonResolveView.as_view(), name='api_person_resolve'),
    path('api/persons/list', api_views.PersonsListView.as_view(), name='api_persons_list'),
    path('api/students/faculties', api_views.StudentFacultiesView.as_view(), name='api_student_faculties'),
    path('api/students/years', api_views.StudentYearsView.as_view(), name='api_student_years'),
    path('api/students/list', api_views.StudentListView.as_view(), name='api_student_list'),
]
