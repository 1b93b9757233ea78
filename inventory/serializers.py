from rest_framework import serializers
from .models import Category, Menu


class CategorySerializer(serializers.ModelSerializer):
    menus_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = Category
        fields = ['id', 'name', 'icon', 'menus_count', 'created_at']
        read_only_fields = ['created_at', 'menus_count']


class MenuListSerializer(serializers.ModelSerializer):
    category_name = serializers.CharField(source='category.name', read_only=True)

    class Meta:
        model = Menu
        fields = ['id', 'name', 'price', 'icon', 'category', 'category_name', 'created_at']


class MenuCreateUpdateSerializer(serializers.ModelSerializer):
    category_id = serializers.PrimaryKeyRelatedField(
        source='category', queryset=Category.objects.all()
    )
    price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)

    class Meta:
        model = Menu
        fields = ['id', 'category_id', 'name', 'price', 'icon']

    def to_representation(self, instance):
        return MenuListSerializer(instance, context=self.context).data
