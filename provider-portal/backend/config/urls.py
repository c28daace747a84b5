from django.urls import include, path

urlpatterns = [
    path('api/', include('portal.urls')),
]

handler404 = 'portal.views.not_found'
