"""
Goods catalog: categories (groups) and the items inside them.
"""
from django.db import models


class GoodsCategory(models.Model):
    name_am = models.CharField(max_length=150)
    name_en = models.CharField(max_length=150)
    name_ru = models.CharField(max_length=150)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'goods_categories'
        verbose_name_plural = 'Goods categories'
        ordering = ['name_en']

    def __str__(self):
        return self.name_en


class GoodsItem(models.Model):
    category = models.ForeignKey(
        GoodsCategory,
        on_delete=models.CASCADE,
        related_name='items'
    )
    name_am = models.CharField(max_length=150)
    name_en = models.CharField(max_length=150)
    name_ru = models.CharField(max_length=150)
    measurements = models.CharField(max_length=50, blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'goods_items'
        ordering = ['name_en']

    def __str__(self):
        return self.name_en
