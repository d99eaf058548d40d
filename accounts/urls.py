from django.urls import path

from .views import home, login_view, logout_view, signup_view

app_name = "accounts"

urlpatterns = [
    path("", home, name="home"),
    path("auth/login/", login_view, name="login"),
    path("auth/register/", signup_view, name="signup"),
    path("auth/logout/", logout_view, name="logout"),
]
