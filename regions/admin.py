from django.contrib import admin

from .models import Region, Village


class VillageInline(admin.TabularInline):
    model = Village
    extra = 0


@admin.register(Region)
class RegionAdmin(admin.ModelAdmin):
    list_display = ('id', 'name_en', 'name_am', 'name_ru')
    search_fields = ('name_en', 'name_am', 'name_ru')
    inlines = [VillageInline]


@admin.register(Village)
class VillageAdmin(admin.ModelAdmin):
    list_display = ('id', 'name_en', 'region')
    list_filter = ('region',)
    search_fields = ('name_en', 'name_am', 'name_ru')
