# Generated manually for the racha app

import uuid
from decimal import Decimal
from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('events', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Participant',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=100)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('event', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='participants', to='events.event')),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='racha_participations', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'racha_participants',
                'ordering': ['created_at', 'id'],
                'indexes': [models.Index(fields=['event', 'is_active'], name='racha_part_event_active_idx')],
                'constraints': [models.UniqueConstraint(condition=models.Q(('user__isnull', False)), fields=('event', 'user'), name='uniq_racha_participant_event_user')],
            },
        ),
        migrations.CreateModel(
            name='Expense',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('description', models.CharField(max_length=200)),
                ('total_amount', models.DecimalField(decimal_places=2, max_digits=10, validators=[MinValueValidator(Decimal('0.01'))])),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('event', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='expenses', to='events.event')),
                ('payer', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='expenses_paid', to='racha.participant')),
            ],
            options={
                'db_table': 'racha_expenses',
                'ordering': ['created_at', 'id'],
                'indexes': [
                    models.Index(fields=['event', 'created_at'], name='racha_exp_event_created_idx'),
                    models.Index(fields=['payer'], name='racha_exp_payer_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ExpenseShare',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('share_amount', models.DecimalField(decimal_places=2, max_digits=10, validators=[MinValueValidator(Decimal('0.00'))])),
                ('expense', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='shares', to='racha.expense')),
                ('participant', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='shares', to='racha.participant')),
            ],
            options={
                'db_table': 'racha_expense_shares',
                'indexes': [models.Index(fields=['participant'], name='racha_share_participant_idx')],
                'unique_together': {('expense', 'participant')},
            },
        ),
        migrations.CreateModel(
            name='Payment',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=10, validators=[MinValueValidator(Decimal('0.01'))])),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('paid', 'Paid'), ('failed', 'Failed'), ('cancelled', 'Cancelled')], default='pending', max_length=20)),
                ('provider', models.CharField(choices=[('pix', 'PIX'), ('manual', 'Manual')], default='pix', max_length=20)),
                ('provider_payment_id', models.CharField(blank=True, max_length=100, null=True, unique=True)),
                ('provider_payload', models.JSONField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('event', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='racha_payments', to='events.event')),
                ('participant', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='payments', to='racha.participant')),
            ],
            options={
                'db_table': 'racha_payments',
                'ordering': ['created_at'],
                'indexes': [
                    models.Index(fields=['event', 'status'], name='racha_pay_event_status_idx'),
                    models.Index(fields=['participant', 'status'], name='racha_pay_part_status_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='PaymentCredit',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('idempotency_key', models.CharField(max_length=100, unique=True)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=10)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('payment', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='credit', to='racha.payment')),
            ],
            options={
                'db_table': 'racha_payment_credits',
                'ordering': ['created_at'],
            },
        ),
    ]
