from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='GoodsCategory',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name_am', models.CharField(max_length=150)),
                ('name_en', models.CharField(max_length=150)),
                ('name_ru', models.CharField(max_length=150)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'db_table': 'goods_categories',
                'verbose_name_plural': 'Goods categories',
                'ordering': ['name_en'],
            },
        ),
        migrations.CreateModel(
            name='GoodsItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name_am', models.CharField(max_length=150)),
                ('name_en', models.CharField(max_length=150)),
                ('name_ru', models.CharField(max_length=150)),
                ('measurements', models.CharField(blank=True, default='', max_length=50)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('category', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='items', to='catalog.goodscategory')),
            ],
            options={
                'db_table': 'goods_items',
                'ordering': ['name_en'],
            },
        ),
    ]
