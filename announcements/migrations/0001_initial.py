import decimal
import django.core.validators
import django.db.models.deletion
import uuid
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('catalog', '0001_initial'),
        ('regions', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Announcement',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('type', models.CharField(choices=[('sell', 'Sell'), ('buy', 'Buy')], max_length=10)),
                ('category', models.CharField(choices=[('goods', 'Goods'), ('rent', 'Rent'), ('service', 'Service')], db_index=True, max_length=10)),
                ('price', models.DecimalField(decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(decimal.Decimal('0'))])),
                ('description', models.TextField(blank=True, default='', max_length=2000)),
                ('status', models.CharField(choices=[('pending', 'Pending Review'), ('published', 'Published'), ('closed', 'Closed'), ('canceled', 'Canceled'), ('blocked', 'Blocked')], db_index=True, default='pending', max_length=20)),
                ('count', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('daily_limit', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('available_quantity', models.DecimalField(blank=True, decimal_places=2, help_text='count minus approved applications (goods only)', max_digits=10, null=True)),
                ('unit', models.CharField(blank=True, choices=[('kg', 'Kilogram'), ('ton', 'Ton'), ('pcs', 'Pieces'), ('liter', 'Liter'), ('bag', 'Bag'), ('m2', 'Square meter'), ('ha', 'Hectare')], max_length=10, null=True)),
                ('date_from', models.DateField(blank=True, null=True)),
                ('date_to', models.DateField(blank=True, null=True)),
                ('min_area', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('expiry_date', models.DateField(blank=True, db_index=True, null=True)),
                ('images', models.JSONField(blank=True, default=list, help_text='Storage keys, at most 3')),
                ('views_count', models.PositiveIntegerField(default=0)),
                ('cancellation_kind', models.CharField(blank=True, choices=[('canceled', 'Canceled by owner'), ('deleted', 'Deleted by owner')], max_length=10, null=True)),
                ('published_at', models.DateTimeField(blank=True, null=True)),
                ('closed_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('closed_by', models.ForeignKey(blank=True, help_text='Admin/owner who closed or blocked; empty for system closes', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='closed_announcements', to=settings.AUTH_USER_MODEL)),
                ('group', models.ForeignKey(help_text='Catalog category', on_delete=django.db.models.deletion.PROTECT, related_name='announcements', to='catalog.goodscategory')),
                ('item', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='announcements', to='catalog.goodsitem')),
                ('owner', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='announcements', to=settings.AUTH_USER_MODEL)),
                ('regions', models.ManyToManyField(blank=True, related_name='announcements', to='regions.region')),
                ('villages', models.ManyToManyField(blank=True, related_name='announcements', to='regions.village')),
            ],
            options={
                'db_table': 'announcements',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['status', 'expiry_date'], name='ann_status_expiry_idx'),
                    models.Index(fields=['owner', 'status'], name='ann_owner_status_idx'),
                    models.Index(fields=['category', 'status'], name='ann_category_status_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('price__gte', 0)), name='ann_price_non_negative'),
                    models.CheckConstraint(condition=models.Q(('available_quantity__isnull', True), models.Q(('available_quantity__gte', 0), ('available_quantity__lte', models.F('count'))), _connector='OR'), name='ann_available_within_count'),
                ],
            },
        ),
        migrations.CreateModel(
            name='AnnouncementView',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('viewed_at', models.DateTimeField(auto_now_add=True)),
                ('announcement', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='view_records', to='announcements.announcement')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='announcement_views', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'announcement_views',
                'constraints': [models.UniqueConstraint(fields=('announcement', 'user'), name='unique_announcement_view_per_user')],
            },
        ),
    ]
