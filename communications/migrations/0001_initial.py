import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

from core.migration_fields import tenant_owned_fields


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('core', '0002_audit_and_lead_teacher'),
        ('students', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='LiaisonMessage',
            fields=tenant_owned_fields() + [
                ('title', models.CharField(max_length=200)),
                ('message', models.TextField()),
                ('kind', models.CharField(
                    choices=[
                        ('info', 'Information'),
                        ('homework', 'Homework'),
                        ('behaviour', 'Behaviour'),
                        ('health', 'Health'),
                        ('praise', 'Praise'),
                        ('sanction', 'Sanction'),
                    ],
                    default='info',
                    max_length=20,
                )),
                ('read_by_parent', models.BooleanField(default=False)),
                ('read_at', models.DateTimeField(blank=True, null=True)),
                ('reply_required', models.BooleanField(default=False)),
                ('parent_reply', models.TextField(blank=True)),
                ('replied_at', models.DateTimeField(blank=True, null=True)),
                ('child', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name='liaison_messages',
                    to='students.child',
                )),
            ],
            options={
                'db_table': 'communications_liaison_message',
                'ordering': ['-created_at'],
            },
        ),
        migrations.AddIndex(
            model_name='liaisonmessage',
            index=models.Index(fields=['school', 'child'], name='liaison_school_child_idx'),
        ),
        migrations.CreateModel(
            name='Announcement',
            fields=tenant_owned_fields() + [
                ('title', models.CharField(max_length=200)),
                ('content', models.TextField()),
                ('kind', models.CharField(
                    choices=[
                        ('general', 'General'),
                        ('canteen', 'Canteen'),
                        ('activity', 'Activity'),
                        ('urgent', 'Urgent'),
                        ('information', 'Information'),
                    ],
                    default='general',
                    max_length=20,
                )),
                ('published_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('target_class', models.CharField(blank=True, max_length=100)),
                ('send_notification', models.BooleanField(default=False)),
            ],
            options={
                'db_table': 'communications_announcement',
                'ordering': ['-published_at'],
            },
        ),
        migrations.AddIndex(
            model_name='announcement',
            index=models.Index(fields=['school', 'target_class'], name='announcement_target_idx'),
        ),
        migrations.CreateModel(
            name='Activity',
            fields=tenant_owned_fields() + [
                ('name', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True)),
                ('start_date', models.DateField()),
                ('end_date', models.DateField(blank=True, null=True)),
                ('start_time', models.TimeField(blank=True, null=True)),
                ('end_time', models.TimeField(blank=True, null=True)),
                ('location', models.CharField(blank=True, max_length=200)),
                ('target_class', models.CharField(blank=True, max_length=100)),
            ],
            options={
                'db_table': 'communications_activity',
                'ordering': ['start_date', 'start_time'],
                'verbose_name_plural': 'Activities',
            },
        ),
        migrations.AddIndex(
            model_name='activity',
            index=models.Index(fields=['school', 'target_class'], name='activity_target_idx'),
        ),
    ]
