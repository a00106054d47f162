"""
Location lookup tables.

Announcements target one or more regions (and optionally villages inside
them); users are registered in a region, which drives publish fan-out.
"""
from django.db import models


class Region(models.Model):
    name_am = models.CharField(max_length=100)
    name_en = models.CharField(max_length=100)
    name_ru = models.CharField(max_length=100)

    class Meta:
        db_table = 'regions'
        ordering = ['name_en']

    def __str__(self):
        return self.name_en


class Village(models.Model):
    region = models.ForeignKey(
        Region,
        on_delete=models.CASCADE,
        related_name='villages'
    )
    name_am = models.CharField(max_length=100)
    name_en = models.CharField(max_length=100)
    name_ru = models.CharField(max_length=100)

    class Meta:
        db_table = 'villages'
        ordering = ['name_en']
        indexes = [
            models.Index(fields=['region'], name='villages_region_idx'),
        ]

    def __str__(self):
        return f"{self.name_en} ({self.region})"
