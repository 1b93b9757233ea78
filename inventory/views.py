from rest_framework import generics, filters
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django_filters.rest_framework import DjangoFilterBackend
from django.db.models import Count
from django.shortcuts import get_object_or_404
from django.utils.translation import gettext as _

from authentication.exceptions import BusinessRuleViolation
from authentication.permissions import IsAdminOrReadOnly
from .models import Category, Menu
from .serializers import CategorySerializer, MenuListSerializer, MenuCreateUpdateSerializer


# Category Views
class CategoryListCreateView(generics.ListCreateAPIView):
    """
    get: List all categories with their menu count
    post: Create a new category (admins only)
    """
    serializer_class = CategorySerializer
    permission_classes = [IsAdminOrReadOnly]
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ['name']
    ordering_fields = ['name', 'created_at']
    ordering = ['-created_at']
    pagination_class = None

    def get_queryset(self):
        return Category.objects.annotate(menus_count=Count('menus'))


class CategoryRetrieveUpdateDestroyView(generics.RetrieveUpdateDestroyAPIView):
    """
    get: Get category details
    put/patch: Update category (admins only)
    delete: Delete category (admins only, only when it has no menus)
    """
    serializer_class = CategorySerializer
    permission_classes = [IsAdminOrReadOnly]

    def get_queryset(self):
        return Category.objects.annotate(menus_count=Count('menus'))

    def perform_destroy(self, instance):
        if instance.menus.exists():
            raise BusinessRuleViolation(_('Cannot delete a category that still has menus.'))
        instance.delete()


# Menu Views
class MenuListCreateView(generics.ListCreateAPIView):
    """
    get: List menus, filterable by category and searchable by name
    post: Create a new menu (admins only)
    """
    queryset = Menu.objects.select_related('category')
    permission_classes = [IsAdminOrReadOnly]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['category']
    search_fields = ['name']
    ordering_fields = ['name', 'price', 'created_at']
    ordering = ['-created_at']
    pagination_class = None

    def get_serializer_class(self):
        if self.request.method == 'POST':
            return MenuCreateUpdateSerializer
        return MenuListSerializer


class MenuRetrieveUpdateDestroyView(generics.RetrieveUpdateDestroyAPIView):
    """
    get: Get menu details
    put/patch: Update menu (admins only)
    delete: Delete menu (admins only). Past order lines keep their snapshot.
    """
    queryset = Menu.objects.select_related('category')
    permission_classes = [IsAdminOrReadOnly]

    def get_serializer_class(self):
        if self.request.method in ['PUT', 'PATCH']:
            return MenuCreateUpdateSerializer
        return MenuListSerializer


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def menu_by_category(request, category_id):
    """Get all menus in a specific category"""
    category = get_object_or_404(Category, id=category_id)
    menus = Menu.objects.filter(category=category).select_related('category').order_by('name')

    serializer = MenuListSerializer(menus, many=True)
    return Response({
        'category': CategorySerializer(category).data,
        'menus': serializer.data,
        'count': menus.count(),
    })
