"""URL configuration for the compliance app."""

from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from . import views_api
from . import views_auth

urlpatterns = [
    path("api/token/", views_auth.StaffTokenObtainPairView.as_view(), name="token_obtain_pair"),
    path("api/token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
    path("api/admin/export-faf/", views_api.api_export_faf, name="api_export_faf"),
    path("api/admin/export-faf/excel/", views_api.api_export_faf_excel, name="api_export_faf_excel"),
    path("api/admin/vat-report/", views_api.api_vat_report, name="api_vat_report"),
    path("api/admin/test-data/import/", views_api.api_import_test_data, name="api_import_test_data"),
    path("api/admin/test-data/sample/", views_api.api_sample_test_data, name="api_sample_test_data"),
]
