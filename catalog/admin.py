from django.contrib import admin

from .models import GoodsCategory, GoodsItem


class GoodsItemInline(admin.TabularInline):
    model = GoodsItem
    extra = 0


@admin.register(GoodsCategory)
class GoodsCategoryAdmin(admin.ModelAdmin):
    list_display = ('id', 'name_en', 'name_am', 'created_at')
    search_fields = ('name_en', 'name_am', 'name_ru')
    inlines = [GoodsItemInline]


@admin.register(GoodsItem)
class GoodsItemAdmin(admin.ModelAdmin):
    list_display = ('id', 'name_en', 'category', 'measurements')
    list_filter = ('category',)
    search_fields = ('name_en', 'name_am', 'name_ru')
