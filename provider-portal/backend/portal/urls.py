from django.urls import path
from .views import PatientListCreateView, ProviderSignupView, PublicPatientCreateView

urlpatterns = [
    path('provider/signup', ProviderSignupView.as_view(), name='provider-signup'),
    path('patients', PatientListCreateView.as_view(), name='patient-list-create'),
    path('patients/public', PublicPatientCreateView.as_view(), name='patient-public-create'),
]
