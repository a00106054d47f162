from rest_framework import serializers

from .models import Region, Village


class VillageSerializer(serializers.ModelSerializer):
    class Meta:
        model = Village
        fields = ['id', 'region', 'name_am', 'name_en', 'name_ru']


class RegionSerializer(serializers.ModelSerializer):
    class Meta:
        model = Region
        fields = ['id', 'name_am', 'name_en', 'name_ru']
