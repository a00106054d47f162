from rest_framework import serializers

from .models import GoodsCategory, GoodsItem


class GoodsItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = GoodsItem
        fields = ['id', 'category', 'name_am', 'name_en', 'name_ru', 'measurements']


class GoodsCategorySerializer(serializers.ModelSerializer):
    items = GoodsItemSerializer(many=True, read_only=True)

    class Meta:
        model = GoodsCategory
        fields = ['id', 'name_am', 'name_en', 'name_ru', 'items']
