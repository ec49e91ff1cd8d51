"""
Management command to create sample data for testing the API.

Usage:
    python manage.py create_sample_data

This creates:
- 4 users (admin, alice, bob, charlie)
- 1 post-paid event organized by alice with bob, charlie and an
  account-less guest as participants
- A few expenses split among them
- 1 free event (no racha)
"""

from django.core.management.base import BaseCommand
from django.db import transaction
from decimal import Decimal

from apps.accounts.models import User
from apps.events.models import Event, EventType
from apps.events.services import create_event
from apps.racha.models import Participant
from apps.racha.services import add_participant, record_expense, compute_settlement


class Command(BaseCommand):
    help = 'Create sample data for testing the API'

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Clear existing data before creating new sample data',
        )

    @transaction.atomic
    def handle(self, *args, **options):
        if options['clear']:
            self.stdout.write('Clearing existing data...')
            self.clear_data()

        self.stdout.write('Creating sample data...')

        users = self.create_users()
        event = self.create_racha(users)
        create_event(
            name='Board game night',
            organizer=users['bob'],
            event_type=EventType.FREE,
        )

        self.stdout.write(self.style.SUCCESS('Sample data created successfully!'))
        self.stdout.write('')
        self.stdout.write(f'Racha "{event.name}" (invite: {event.invite_slug}):')
        for row in compute_settlement(event_id=event.id):
            self.stdout.write(f'  {row.name}: {row.balance}')
        self.stdout.write('')
        self.stdout.write('Test accounts:')
        self.stdout.write('  admin@example.com / admin123 (superuser)')
        self.stdout.write('  alice@example.com / password123')
        self.stdout.write('  bob@example.com / password123')
        self.stdout.write('  charlie@example.com / password123')

    def clear_data(self):
        """Clear all data from the database."""
        Event.objects.all().delete()
        User.objects.filter(is_superuser=False).delete()

    def create_users(self):
        """Create sample users."""
        users = {}

        admin, created = User.objects.get_or_create(
            email='admin@example.com',
            defaults={'name': 'Admin', 'is_staff': True, 'is_superuser': True}
        )
        if created:
            admin.set_password('admin123')
            admin.save()
        users['admin'] = admin

        for key, name, pix_key in [
            ('alice', 'Alice', 'alice@pix.example'),
            ('bob', 'Bob', ''),
            ('charlie', 'Charlie', '+5511999990000'),
        ]:
            user, created = User.objects.get_or_create(
                email=f'{key}@example.com',
                defaults={'name': name, 'pix_key': pix_key}
            )
            if created:
                user.set_password('password123')
                user.save()
            users[key] = user

        self.stdout.write(f'  Created {len(users)} users')
        return users

    def create_racha(self, users):
        """Create a post-paid event with participants and expenses."""
        event = create_event(
            name='Beach weekend',
            organizer=users['alice'],
            location='Ubatuba',
        )

        alice = Participant.objects.get(event=event, user=users['alice'])
        bob = add_participant(event_id=event.id, user=users['bob'])
        charlie = add_participant(event_id=event.id, user=users['charlie'])
        guest = add_participant(event_id=event.id, name='Dani (guest)')
        everyone = [alice.id, bob.id, charlie.id, guest.id]

        expenses = [
            (alice, Decimal('480.00'), everyone, 'House rental'),
            (bob, Decimal('157.30'), everyone, 'Groceries'),
            (charlie, Decimal('60.00'), [bob.id, charlie.id], 'Fuel'),
            (guest, Decimal('35.99'), [alice.id, guest.id], 'Ice cream'),
        ]
        for payer, amount, participant_ids, description in expenses:
            record_expense(
                event_id=event.id,
                payer_id=payer.id,
                total_amount=amount,
                participant_ids=participant_ids,
                description=description,
            )

        self.stdout.write(f'  Created racha with {len(expenses)} expenses')
        return event
