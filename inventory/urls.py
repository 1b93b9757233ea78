from django.urls import path
from . import views


urlpatterns = [
    # Category URLs
    path('categories/', views.CategoryListCreateView.as_view(), name='category-list-create'),
    path('categories/<int:pk>/', views.CategoryRetrieveUpdateDestroyView.as_view(), name='category-detail'),

    # Menu URLs
    path('menus/', views.MenuListCreateView.as_view(), name='menu-list-create'),
    path('menus/<int:pk>/', views.MenuRetrieveUpdateDestroyView.as_view(), name='menu-detail'),
    path('menus/by-category/<int:category_id>/', views.menu_by_category, name='menu-by-category'),
]
