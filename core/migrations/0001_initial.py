import django.core.validators
import django.db.models.deletion
from django.db import migrations, models

import core.models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='School',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('is_deleted', models.BooleanField(db_index=True, default=False)),
                ('deleted_at', models.DateTimeField(blank=True, null=True)),
                ('name', models.CharField(max_length=200)),
                ('code', models.CharField(help_text='Upper-case letters, digits and underscores', max_length=20)),
                ('address', models.CharField(blank=True, max_length=500)),
                ('city', models.CharField(blank=True, max_length=100)),
                ('phone', models.CharField(blank=True, max_length=20)),
                ('email', models.EmailField(max_length=100)),
                ('school_year', models.CharField(
                    default=core.models.current_school_year,
                    max_length=9,
                    validators=[core.models.validate_school_year],
                )),
            ],
            options={
                'db_table': 'core_school',
                'ordering': ['name'],
            },
        ),
        migrations.AddConstraint(
            model_name='school',
            constraint=models.UniqueConstraint(
                condition=models.Q(('is_deleted', False)), fields=('code',), name='uniq_live_school_code'
            ),
        ),
        migrations.AddConstraint(
            model_name='school',
            constraint=models.UniqueConstraint(
                condition=models.Q(('is_deleted', False)), fields=('email',), name='uniq_live_school_email'
            ),
        ),
        migrations.CreateModel(
            name='Classroom',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('is_deleted', models.BooleanField(db_index=True, default=False)),
                ('deleted_at', models.DateTimeField(blank=True, null=True)),
                ('name', models.CharField(max_length=100)),
                ('capacity', models.PositiveSmallIntegerField(
                    default=30,
                    validators=[
                        django.core.validators.MinValueValidator(1),
                        django.core.validators.MaxValueValidator(100),
                    ],
                )),
                ('school', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT, related_name='+', to='core.school'
                )),
            ],
            options={
                'db_table': 'core_classroom',
                'ordering': ['name'],
            },
        ),
        migrations.AddConstraint(
            model_name='classroom',
            constraint=models.UniqueConstraint(
                condition=models.Q(('is_deleted', False)), fields=('school', 'name'), name='uniq_live_classroom_name'
            ),
        ),
        migrations.AddIndex(
            model_name='classroom',
            index=models.Index(fields=['school', 'is_deleted'], name='classroom_school_live_idx'),
        ),
    ]
