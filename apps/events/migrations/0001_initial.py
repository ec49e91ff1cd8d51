# Generated manually for the events app

import uuid
from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Event',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True)),
                ('location', models.CharField(blank=True, max_length=200)),
                ('event_date', models.DateTimeField(blank=True, null=True)),
                ('event_type', models.CharField(choices=[('free', 'Free'), ('prepaid', 'Pre-paid (tickets)'), ('postpaid', 'Post-paid (racha)')], default='postpaid', max_length=20)),
                ('invite_slug', models.CharField(db_index=True, editable=False, max_length=16, unique=True)),
                ('is_closed', models.BooleanField(default=False)),
                ('closed_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('organizer', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='organized_events', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'events',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['organizer', 'created_at'], name='events_organizer_idx'),
                    models.Index(fields=['event_type', 'is_closed'], name='events_type_closed_idx'),
                ],
            },
        ),
    ]
